from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

COMMAND_ALIASES = {
    "n": "go north",
    "s": "go south",
    "e": "go east",
    "w": "go west",
    "u": "go up",
    "d": "go down",
    "go n": "go north",
    "go s": "go south",
    "go e": "go east",
    "go w": "go west",
    "i": "inventory",
    "inv": "inventory",
    "x": "examine",
    "l": "look",
    "h": "help",
    "take": "get",
    "pick up": "get",
    "end it": "die",
    "exit": "quit",
}

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_SPACES = re.compile(r"\s+")


class Verb(str, Enum):
    GO = "go"
    LOOK = "look"
    EXAMINE = "examine"
    GET = "get"
    INVENTORY = "inventory"
    HELP = "help"
    PLAY = "play"
    TRADE = "trade"
    ASK = "ask"
    TALK = "talk"
    QUIT = "quit"
    DRINK = "drink"
    UNLOCK = "unlock"
    DIE = "die"
    TRAVEL = "travel"
    # Poker verbs are only routed while a hand is running.
    CHECK = "check"
    BET = "bet"
    CALL = "call"
    RAISE = "raise"
    WAGER = "wager"
    FOLD = "fold"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Command:
    verb: Verb
    noun: str
    raw: str
    word: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.word


def normalize(raw: str) -> str:
    text = _PARENTHETICAL.sub(" ", raw.lower())
    return _SPACES.sub(" ", text).strip()


def expand_aliases(text: str) -> str:
    if text in COMMAND_ALIASES:
        return COMMAND_ALIASES[text]
    # Longest leading alias wins ("pick up coin" -> "get coin", "x coin" -> "examine coin").
    for alias in sorted(COMMAND_ALIASES, key=len, reverse=True):
        if text.startswith(alias + " "):
            return COMMAND_ALIASES[alias] + text[len(alias):]
    return text


def parse_command(raw: str) -> Command:
    text = expand_aliases(normalize(raw))
    word, _, noun = text.partition(" ")
    try:
        verb = Verb(word)
    except ValueError:
        verb = Verb.UNKNOWN
    return Command(verb=verb, noun=noun.strip(), raw=raw, word=word)
