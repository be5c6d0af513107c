from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from poker.game import PokerTable
from poker.models import TableConfig

from .world import START_LOCATION, Location, build_world


@dataclass
class GameConfig:
    start_location: str = START_LOCATION
    trade_value: int = 1000
    # A drink succeeds when rng.random() lands above this.
    drink_success_threshold: float = 0.5
    # Raise invariant violations instead of logging them and carrying on.
    strict: bool = True
    seed: Optional[int] = None
    table: TableConfig = field(default_factory=TableConfig)


@dataclass
class GameState:
    table: PokerTable
    location: str = START_LOCATION
    world: Dict[str, Location] = field(default_factory=build_world)
    inventory: List[str] = field(default_factory=list)
    money: int = 0
    loop: int = 0
    visited: Set[str] = field(default_factory=set)
    running: bool = False
    won: bool = False

    @property
    def here(self) -> Location:
        return self.world[self.location]

    @property
    def in_poker_game(self) -> bool:
        return self.table.is_active
