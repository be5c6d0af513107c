"""Terminal and WebSocket front ends: wrap the game with input and output only."""

from .server import ConsolePresenter, SessionServer, run_console

__all__ = ["ConsolePresenter", "SessionServer", "run_console"]
