from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .cards import Card


class Phase(str, Enum):
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"
    ROUND_CLOSED = "ROUND_CLOSED"


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    WAGER = "wager"


@dataclass(frozen=True)
class NpcProfile:
    name: str
    chips: int
    items: Tuple[str, ...] = ()


DEFAULT_NPCS = (
    NpcProfile("Dealer", 1000),
    NpcProfile("The Jackal", 1500, ("ornate gun",)),
    NpcProfile("Vex", 800, ("silver locket",)),
)


@dataclass
class TableConfig:
    sb: int = 5
    bb: int = 10
    buy_in: int = 10
    human_name: str = "You"
    npcs: Tuple[NpcProfile, ...] = DEFAULT_NPCS

    @property
    def seats(self) -> int:
        return len(self.npcs) + 1


@dataclass
class PlayerSeat:
    seat: int
    name: str
    stack: int
    is_human: bool = False
    items: List[str] = field(default_factory=list)
    committed: int = 0
    has_folded: bool = False
    last_action: Optional[ActionType] = None
    last_bet: int = 0
    hole_cards: List[Card] = field(default_factory=list)

    @property
    def is_all_in(self) -> bool:
        return self.stack == 0 and not self.has_folded

    def reset_for_round(self) -> None:
        self.committed = 0
        self.last_action = None
        self.last_bet = 0


@dataclass
class Pot:
    chips: int = 0
    items: List[str] = field(default_factory=list)


@dataclass
class Settlement:
    winners: List[int]
    winner_names: List[str]
    chips_won: int
    share: int
    remainder: int
    items: List[str]
    item_winner: Optional[int]
    human_stack: int
    human_items: List[str]
