from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence

from adventure.dispatcher import Game
from adventure.output import Category, OutputLine
from adventure.state import GameConfig
from poker.cards import Card, build_deck, parse_cards
from poker.game import PokerTable
from poker.models import ActionType
from poker.npc import Decision


class ScriptedRandom(random.Random):
    """random() replays fixed draws and fails loudly when an unexpected draw happens."""

    def __init__(self, draws: Sequence[float] = (), seed: int = 0) -> None:
        super().__init__(seed)
        self.draws = list(draws)

    def random(self) -> float:
        if not self.draws:
            raise AssertionError("Unexpected random draw")
        return self.draws.pop(0)

    def getrandbits(self, k: int) -> int:
        # Keeps randrange/shuffle on the seeded generator.
        return super().getrandbits(k)


def stacked_deck(labels: Sequence[str]) -> List[Card]:
    """Deck whose top cards are ``labels``; the rest follow in build order.

    Seats receive two cards each in seat order (human first), then the
    flop, turn and river are dealt from what remains.
    """
    top = parse_cards(labels)
    rest = [card for card in build_deck() if card not in top]
    return top + rest


def rig_deck(monkeypatch, labels: Sequence[str]) -> None:
    monkeypatch.setattr("poker.game.build_deck", lambda: stacked_deck(labels))
    monkeypatch.setattr("poker.game.shuffle", lambda deck, rng=None: None)


def passive_npcs(monkeypatch) -> None:
    """NPCs always call (or check when nothing is owed) and never throw in items."""
    monkeypatch.setattr("poker.game.decide", lambda *args, **kwargs: Decision(ActionType.CALL))
    monkeypatch.setattr("poker.game.choose_item_wager", lambda *args, **kwargs: None)


def create_table(seed: int = 42, rng: Optional[random.Random] = None) -> PokerTable:
    return PokerTable(rng=rng or random.Random(seed))


def create_game(seed: int = 1, rng: Optional[random.Random] = None, **config) -> Game:
    game = Game(GameConfig(seed=seed, **config), rng=rng)
    game.start()
    return game


def play(game: Game, commands: Iterable[str]) -> List[OutputLine]:
    lines: List[OutputLine] = []
    for command in commands:
        lines.extend(game.process_command(command))
    return lines


def texts(lines: Iterable[OutputLine], category: Optional[Category] = None) -> List[str]:
    return [line.text for line in lines if category is None or line.category == category]
