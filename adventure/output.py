from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    STORY = "story"
    GAME = "game"
    HELP = "help"
    ERROR = "error"
    HISTORY = "history"


@dataclass(frozen=True)
class OutputLine:
    text: str
    category: Category = Category.GAME

    def to_dict(self) -> dict:
        return {"category": self.category.value, "text": self.text}


class Presenter:
    """Side-effect sink for whatever draws the game. Nothing flows back into the rules."""

    def write(self, line: OutputLine) -> None:
        pass

    def location_changed(self, location_id: str) -> None:
        pass
