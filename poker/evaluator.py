from __future__ import annotations

import itertools
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import Card

WHEEL = (14, 5, 4, 3, 2)


class HandRank(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True)
class Hand:
    rank: HandRank
    values: Tuple[int, ...]
    cards: Tuple[Card, ...]

    @property
    def name(self) -> str:
        return self.rank.label

    @property
    def key(self) -> Tuple[int, Tuple[int, ...]]:
        return (int(self.rank), self.values)


def evaluate(cards: Sequence[Card]) -> Hand:
    """Classify exactly five cards."""
    if len(cards) != 5:
        raise ValueError(f"evaluate expects 5 cards, got {len(cards)}")

    five = tuple(cards)
    ranks = sorted((card.value for card in five), reverse=True)
    is_flush = len({card.suit for card in five}) == 1
    straight_high = _straight_high(ranks)

    counts = Counter(ranks)
    # Kicker order: more copies first, then higher value.
    grouped = tuple(sorted(counts, key=lambda value: (counts[value], value), reverse=True))
    shape = sorted(counts.values(), reverse=True)

    if straight_high and is_flush:
        rank = HandRank.ROYAL_FLUSH if straight_high == 14 else HandRank.STRAIGHT_FLUSH
        return Hand(rank, (straight_high,), five)
    if shape[0] == 4:
        return Hand(HandRank.FOUR_OF_A_KIND, grouped, five)
    if shape[:2] == [3, 2]:
        return Hand(HandRank.FULL_HOUSE, grouped, five)
    if is_flush:
        return Hand(HandRank.FLUSH, tuple(ranks), five)
    if straight_high:
        return Hand(HandRank.STRAIGHT, (straight_high,), five)
    if shape[0] == 3:
        return Hand(HandRank.THREE_OF_A_KIND, grouped, five)
    if shape[:2] == [2, 2]:
        return Hand(HandRank.TWO_PAIR, grouped, five)
    if shape[0] == 2:
        return Hand(HandRank.ONE_PAIR, grouped, five)
    return Hand(HandRank.HIGH_CARD, tuple(ranks), five)


def _straight_high(ranks: List[int]) -> Optional[int]:
    if tuple(ranks) == WHEEL:
        return 5
    if len(set(ranks)) == 5 and ranks[0] - ranks[4] == 4:
        return ranks[0]
    return None


def compare_hands(a: Hand, b: Hand) -> int:
    """Return 1 if ``a`` wins, -1 if ``b`` wins, 0 on a split."""
    if a.key == b.key:
        return 0
    return 1 if a.key > b.key else -1


def best_hand(cards: Sequence[Card]) -> Hand:
    """Return the strongest five-card hand among 5 to 7 cards (Texas Hold'em)."""
    if len(cards) < 5:
        raise ValueError(f"Need at least 5 cards, got {len(cards)}")
    best: Optional[Hand] = None
    for combo in itertools.combinations(cards, 5):
        hand = evaluate(combo)
        if best is None or compare_hands(hand, best) > 0:
            best = hand
    assert best is not None
    return best


def hand_strength(hole: Iterable[Card], community: Iterable[Card]) -> HandRank:
    cards = list(hole) + list(community)
    if len(cards) < 5:
        return HandRank.HIGH_CARD
    return best_hand(cards).rank


def winners(hands: Sequence[Tuple[int, Hand]]) -> List[int]:
    """Seats holding the maximal hand, in the order given."""
    top: List[int] = []
    top_hand: Optional[Hand] = None
    for seat, hand in hands:
        if top_hand is None or compare_hands(hand, top_hand) > 0:
            top_hand = hand
            top = [seat]
        elif compare_hands(hand, top_hand) == 0:
            top.append(seat)
    return top
