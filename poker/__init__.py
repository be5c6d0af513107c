"""Saloon poker primitives: cards, hand ranking, NPC policy and the betting table."""

from .cards import Card, DeckExhausted, RANKS, SUITS, build_deck, deal, parse_cards, shuffle
from .evaluator import Hand, HandRank, best_hand, compare_hands, evaluate, hand_strength
from .game import HandContext, IllegalAction, PokerTable
from .models import ActionType, Phase, PlayerSeat, Settlement, TableConfig
from .npc import Decision, decide

__all__ = [
    "Card",
    "DeckExhausted",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "parse_cards",
    "shuffle",
    "Hand",
    "HandRank",
    "best_hand",
    "compare_hands",
    "evaluate",
    "hand_strength",
    "HandContext",
    "IllegalAction",
    "PokerTable",
    "ActionType",
    "Phase",
    "PlayerSeat",
    "Settlement",
    "TableConfig",
    "Decision",
    "decide",
]
