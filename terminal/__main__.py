import argparse
import asyncio
import logging

from adventure.state import GameConfig

from .server import SessionServer, run_console


def main() -> None:
    parser = argparse.ArgumentParser(description="Gunslinger Loop: a western text adventure with a poker table")
    parser.add_argument("--seed", type=int, default=None, help="Seed the shuffle, NPCs and concoctions")
    parser.add_argument("--serve", action="store_true", help="Serve one private game per WebSocket connection")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Log engine invariant violations and keep playing instead of crashing",
    )
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    config = GameConfig(seed=args.seed, strict=not args.lenient)
    if args.serve:
        server = SessionServer(config)
        asyncio.run(server.start(host=args.host, port=args.port))
    else:
        run_console(config)


if __name__ == "__main__":
    main()
