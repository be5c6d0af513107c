"""Gunslinger Loop world: locations, loop state and the command dispatcher."""

from .commands import Command, Verb, parse_command
from .dispatcher import Game
from .output import Category, OutputLine, Presenter
from .state import GameConfig, GameState

__all__ = [
    "Command",
    "Verb",
    "parse_command",
    "Game",
    "Category",
    "OutputLine",
    "Presenter",
    "GameConfig",
    "GameState",
]
