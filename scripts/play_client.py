#!/usr/bin/env python3
"""Play Gunslinger Loop against a running ``python -m terminal --serve``.

Example:
    python scripts/play_client.py --url ws://127.0.0.1:8765
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List

import websockets
from websockets.asyncio.client import ClientConnection

LOGGER = logging.getLogger("play_client")

# PlayClient mirrors what a browser page would do, with terminal prompts.

_PREFIXES = {"story": "", "game": "", "help": "  ", "error": "!! ", "history": ""}


class PlayClient:
    def __init__(self, url: str) -> None:
        self.url = url
        self.commands: List[str] = []

    async def run(self) -> None:
        async with websockets.connect(self.url) as ws:
            await self._loop(ws)

    async def _loop(self, ws: ClientConnection) -> None:
        running = True
        while True:
            msg = json.loads(await ws.recv())
            running = self._print_message(msg, running)
            if msg.get("type") not in ("output", "error"):
                continue
            if not running:
                print("The loop is broken. Press Ctrl+C to exit.")
                break
            text = await asyncio.to_thread(self._prompt)
            if text is None:
                break
            await ws.send(json.dumps({"type": "command", "text": text}))

    def _prompt(self) -> str | None:
        while True:
            try:
                text = input("> ").strip()
            except EOFError:
                return None
            if text == "?":
                print("Try: " + ", ".join(self.commands))
                continue
            if text:
                return text

    def _print_message(self, msg: Dict[str, Any], running: bool) -> bool:
        msg_type = msg.get("type")
        if msg_type == "welcome":
            print(f"Session {msg['session']} (type '?' for suggested commands)")
        elif msg_type == "location":
            LOGGER.debug("Location changed to %s", msg.get("id"))
        elif msg_type == "output":
            for line in msg.get("lines", []):
                if line["category"] == "history":
                    continue
                print(_PREFIXES.get(line["category"], "") + line["text"])
            self.commands = list(msg.get("commands", []))
            return bool(msg.get("running", True))
        elif msg_type == "error":
            print(f"Server rejected message: {msg.get('code')} {msg.get('msg')}")
        return running


def main() -> None:
    parser = argparse.ArgumentParser(description="Terminal client for a Gunslinger Loop server")
    parser.add_argument("--url", default="ws://127.0.0.1:8765")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        asyncio.run(PlayClient(args.url).run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
