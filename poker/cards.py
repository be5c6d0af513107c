from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("♥", "♦", "♣", "♠")
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}

# ASCII spellings accepted by parse_label ("Th", "As").
_SUIT_ALIASES = {"h": "♥", "d": "♦", "c": "♣", "s": "♠"}
_RANK_ALIASES = {"T": "10", "t": "10"}


class DeckExhausted(ValueError):
    """Raised when more cards are requested than the deck still holds."""


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANK_VALUE:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    def __str__(self) -> str:
        return self.label


def build_deck() -> List[Card]:
    # Suit-major, ranks ascending: 2♥ 3♥ ... A♥ 2♦ ... A♠
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


def shuffle(deck: List[Card], rng: Optional[random.Random] = None) -> None:
    """Fisher-Yates shuffle in place."""
    rng = rng or random.Random()
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randrange(i + 1)
        deck[i], deck[j] = deck[j], deck[i]


def deal(deck: List[Card], count: int) -> List[Card]:
    if count < 0:
        raise ValueError(f"Cannot deal a negative number of cards: {count}")
    if len(deck) < count:
        raise DeckExhausted("Not enough cards left in deck")
    cards = deck[:count]
    del deck[:count]
    return cards


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    text = label.strip()
    if len(text) < 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = text[:-1], text[-1]
    rank = _RANK_ALIASES.get(rank, rank.upper())
    suit = _SUIT_ALIASES.get(suit.lower(), suit)
    return Card(rank, suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
