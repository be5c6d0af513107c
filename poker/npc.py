from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .cards import Card
from .evaluator import HandRank, hand_strength
from .models import ActionType, PlayerSeat

# Probabilities are compared against one rng.random() draw per branch.
AGGRESSION_RATE = 0.8
CAUTIOUS_FOLD_RATE = 0.6
BLUFF_RATE = 0.1
BIG_BET_RATIO = 0.5


@dataclass(frozen=True)
class Decision:
    action: ActionType
    amount: Optional[int] = None


def decide(
    hole: Sequence[Card],
    community: Sequence[Card],
    *,
    current_bet: int,
    to_call: int,
    pot: int,
    chips: int,
    rng: random.Random,
) -> Decision:
    """Pick an action for a saloon regular from hand strength and table pressure."""
    if not community:
        return _preflop(hole, current_bet, to_call)

    strength = hand_strength(hole, community)

    if strength >= HandRank.TWO_PAIR:
        if rng.random() < AGGRESSION_RATE:
            return Decision(ActionType.RAISE, min(chips, pot // 2))
        return Decision(ActionType.CALL, to_call)

    if strength >= HandRank.ONE_PAIR:
        # Pressure is what this seat still owes, not the street's full bet.
        bet_to_pot = to_call / (pot + 1)
        if bet_to_pot > BIG_BET_RATIO and rng.random() < CAUTIOUS_FOLD_RATE:
            return Decision(ActionType.FOLD)
        return Decision(ActionType.CALL, to_call)

    if to_call == 0 and rng.random() < BLUFF_RATE:
        return Decision(ActionType.BET, pot // 3)
    if to_call > 0:
        return Decision(ActionType.FOLD)
    return Decision(ActionType.CHECK)


def _preflop(hole: Sequence[Card], current_bet: int, to_call: int) -> Decision:
    values = [card.value for card in hole]
    high = max(values)
    pocket_pair = len(set(values)) == 1

    if pocket_pair and high > 8:
        return Decision(ActionType.RAISE, current_bet * 2)
    if min(values) > 11:
        return Decision(ActionType.CALL, to_call)
    if to_call > 0:
        return Decision(ActionType.FOLD)
    return Decision(ActionType.CHECK)


def choose_item_wager(seat: PlayerSeat, community: Sequence[Card], item_wagered: bool) -> Optional[str]:
    """First held item when a strong NPC may still raise the stakes this round."""
    if item_wagered or not seat.items:
        return None
    if hand_strength(seat.hole_cards, community) < HandRank.TWO_PAIR:
        return None
    return seat.items[0]
