from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import random
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, TextIO

import websockets
from websockets.asyncio.server import ServerConnection, serve

from adventure.dispatcher import Game
from adventure.output import Category, OutputLine, Presenter
from adventure.state import GameConfig

LOGGER = logging.getLogger("gunslinger.terminal")

# Everything here is presentation: the Game never learns who is drawing it.
# Each WebSocket connection gets its own private Game; nothing is shared.

_PREFIXES = {
    Category.STORY: "",
    Category.GAME: "",
    Category.HELP: "  ",
    Category.ERROR: "!! ",
}


class ConsolePresenter(Presenter):
    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def write(self, line: OutputLine) -> None:
        # The player already sees what they typed.
        if line.category == Category.HISTORY:
            return
        print(_PREFIXES[line.category] + line.text, file=self.stream)

    def location_changed(self, location_id: str) -> None:
        LOGGER.debug("Now at %s", location_id)


def run_console(config: GameConfig, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> Game:
    """Play in the terminal until the loop is broken or input runs dry."""
    game = Game(config, presenter=ConsolePresenter(stdout))
    game.start()
    while game.state.running:
        stdout.write("> ")
        stdout.flush()
        raw = stdin.readline()
        if not raw:
            break
        if raw.strip():
            game.process_command(raw.rstrip("\n"))
    return game


class LocationRecorder(Presenter):
    """Collects location changes so they can be sent after the command finishes."""

    def __init__(self) -> None:
        self.changes: List[str] = []

    def location_changed(self, location_id: str) -> None:
        self.changes.append(location_id)

    def drain(self) -> List[str]:
        changes, self.changes = self.changes, []
        return changes


@dataclass
class ClientSession:
    session_id: int
    websocket: ServerConnection
    game: Game
    presenter: LocationRecorder


class SessionServer:
    def __init__(self, config: GameConfig) -> None:
        self.config = config
        self.sessions: Dict[int, ClientSession] = {}
        self.session_counter = 0

    async def start(self, host: str = "127.0.0.1", port: int = 8765) -> None:
        # serve keeps accepting clients until the process stops.
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Gunslinger Loop listening on %s:%s", host, port)
            await asyncio.Future()

    def open_session(self, websocket: ServerConnection) -> ClientSession:
        self.session_counter += 1
        seed: Optional[int] = None
        if self.config.seed is not None:
            seed = self.config.seed + self.session_counter
        config = dataclasses.replace(self.config, seed=seed)
        presenter = LocationRecorder()
        game = Game(config, rng=random.Random(seed), presenter=presenter)
        session = ClientSession(self.session_counter, websocket, game, presenter)
        self.sessions[session.session_id] = session
        return session

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        session = self.open_session(websocket)
        LOGGER.info("Session %s opened", session.session_id)
        await self._send_json(websocket, "welcome", {"session": session.session_id})
        await self._send_output(session, session.game.start())

        try:
            async for raw in websocket:
                await self._handle_message(session, raw)
        except websockets.ConnectionClosed:
            pass
        finally:
            self.sessions.pop(session.session_id, None)
            LOGGER.info("Session %s closed after %s loops", session.session_id, session.game.state.loop)

    async def _handle_message(self, session: ClientSession, raw: str) -> None:
        message = self._decode(raw)
        text = message.get("text")
        if message.get("type") != "command" or not isinstance(text, str):
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="Expected a command message")
            return
        lines = session.game.process_command(text)
        await self._send_output(session, lines)

    async def _send_output(self, session: ClientSession, lines: List[OutputLine]) -> None:
        for location_id in session.presenter.drain():
            await self._send_json(session.websocket, "location", {"id": location_id})
        state = session.game.state
        await self._send_json(
            session.websocket,
            "output",
            {
                "lines": [line.to_dict() for line in lines],
                "commands": session.game.get_available_commands(),
                "money": state.money,
                "loop": state.loop,
                "running": state.running,
            },
        )

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}
