from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional

from poker.cards import DeckExhausted
from poker.game import Event, IllegalAction, PokerTable
from poker.models import ActionType

from .commands import Command, Verb, parse_command
from .output import Category, OutputLine, Presenter
from .state import GameConfig, GameState
from .world import (
    DEATH_MESSAGES,
    DEFAULT_DEATH_MESSAGE,
    EXAMINE_TEXT,
    LOOP_LORE,
    POKER_LOCATION,
    SCENERY,
    TALK_TEXT,
    WIN_LOCATION,
    apply_loop_changes,
    build_world,
    find_location,
)

LOGGER = logging.getLogger("gunslinger.adventure")

POKER_COMMANDS = ["check", "bet [amount]", "call", "raise [amount]", "wager [item]", "fold"]

_POKER_VERBS = {
    Verb.CHECK: ActionType.CHECK,
    Verb.BET: ActionType.BET,
    Verb.CALL: ActionType.CALL,
    Verb.RAISE: ActionType.RAISE,
    Verb.WAGER: ActionType.WAGER,
    Verb.FOLD: ActionType.FOLD,
}

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


def roman(number: int) -> str:
    result = ""
    for value, glyph in _ROMAN:
        while number >= value:
            result += glyph
            number -= value
    return result


class Game:
    """Command interpreter for Gunslinger Loop.

    One call to :meth:`process_command` runs to completion, including any chain
    of NPC poker turns, and returns the tagged lines it produced. The same
    lines are pushed to the presenter as they are written.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        presenter: Optional[Presenter] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.presenter = presenter or Presenter()
        self.state = GameState(table=PokerTable(self.config.table, self.rng), location=self.config.start_location)
        self._lines: List[OutputLine] = []
        self._handlers: Dict[Verb, Callable[[Command], None]] = {
            Verb.GO: self._handle_go,
            Verb.TRAVEL: self._handle_travel,
            Verb.LOOK: self._handle_look,
            Verb.EXAMINE: self._handle_examine,
            Verb.GET: self._handle_get,
            Verb.INVENTORY: self._handle_inventory,
            Verb.HELP: self._handle_help,
            Verb.PLAY: self._handle_play,
            Verb.TRADE: self._handle_trade,
            Verb.ASK: self._handle_ask,
            Verb.TALK: self._handle_talk,
            Verb.QUIT: self._handle_quit,
            Verb.DIE: self._handle_die,
            Verb.DRINK: self._handle_drink,
            Verb.UNLOCK: self._handle_unlock,
        }

    # Output ----------------------------------------------------------

    def _say(self, text: str, category: Category = Category.GAME) -> None:
        line = OutputLine(text, category)
        self._lines.append(line)
        self.presenter.write(line)

    def _error(self, text: str) -> None:
        self._say(text, Category.ERROR)

    def _flush(self) -> List[OutputLine]:
        lines, self._lines = self._lines, []
        return lines

    # Entry points ----------------------------------------------------

    def start(self) -> List[OutputLine]:
        if self.state.running:
            return []
        self.state.running = True
        self._reset_loop("You come awake atop your horse, at the edge of the chasm that is Gunslinger Loop.")
        return self._flush()

    def process_command(self, raw: str) -> List[OutputLine]:
        if not self.state.running:
            self._error("Game is not running. Start a new game to play again.")
            return self._flush()

        self._say(f"> {raw}", Category.HISTORY)
        command = parse_command(raw)
        if command.is_empty:
            self._error("Say something. Type 'help' for a list of commands.")
            return self._flush()

        try:
            if self.state.in_poker_game:
                self._handle_poker(command)
            else:
                handler = self._handlers.get(command.verb)
                if handler is None:
                    self._error(f"I don't understand that command: '{raw.strip()}'.")
                else:
                    handler(command)
        except (RuntimeError, DeckExhausted):
            if self.config.strict:
                raise
            LOGGER.exception("Invariant violated while handling %r", raw)
            self._error("The world shudders. That didn't work.")
        return self._flush()

    def get_available_commands(self) -> List[str]:
        state = self.state
        if state.in_poker_game:
            return list(POKER_COMMANDS)

        here = state.here
        # dict keeps insertion order and drops duplicates.
        commands: Dict[str, None] = {}
        for direction in here.exits:
            commands[f"go {direction}"] = None
        for item in here.items:
            if item not in SCENERY:
                commands[f"get {item}"] = None
            commands[f"examine {item}"] = None
        if state.location == POKER_LOCATION:
            commands["examine cellar door"] = None
            if "poker table" in here.items:
                commands["play poker"] = None
        for action in here.actions:
            commands[action] = None
        if "tarnished coin" in state.inventory and state.location == "bar":
            commands["trade tarnished coin"] = None
        if "strange concoction" in here.items:
            commands["drink strange concoction"] = None
        if state.location == "bar" and state.loop >= 2:
            commands["ask about the loop"] = None
        if len(state.visited) > 1:
            commands["travel [location]"] = None
        commands["die"] = None
        return list(commands)

    # Loop lifecycle --------------------------------------------------

    def _show_location(self) -> None:
        self._say(self.state.here.description, Category.STORY)

    def _show_commands(self) -> None:
        self._say("Available commands: " + ", ".join(self.get_available_commands()), Category.HELP)

    def _move_to(self, location_id: str) -> None:
        self.state.location = location_id
        self.state.visited.add(location_id)
        self.presenter.location_changed(location_id)

    def _reset_loop(self, message: str) -> None:
        state = self.state
        state.table.abandon()
        state.loop += 1
        state.world = build_world()
        notes = apply_loop_changes(state.world, state.loop)
        state.inventory = []
        state.money = 0
        LOGGER.info("Loop reset to %s: %s", state.loop, message)

        self._say(f"Gunslinger Loop {roman(state.loop)}", Category.STORY)
        self._say("-------------------------", Category.STORY)
        self._error(message)
        for note in notes:
            self._say(note, Category.STORY)
        self._move_to(self.config.start_location)
        self._show_location()
        self._say("Your pockets are empty, the frontier lies unbothered before you.")
        self._show_commands()

    def _end_game(self, text: str) -> None:
        self.state.running = False
        self.state.won = True
        LOGGER.info("Loop broken after %s loops", self.state.loop)
        self._say(text, Category.STORY)
        self._say("--- YOU HAVE BROKEN THE LOOP ---", Category.STORY)
        self._say("Thank you for playing!")

    # World verbs -----------------------------------------------------

    def _handle_go(self, command: Command) -> None:
        destination = self.state.here.exits.get(command.noun)
        if not destination:
            self._error("You can't go that way.")
            return
        if destination == WIN_LOCATION:
            self._end_game(self.state.world[WIN_LOCATION].description)
            return
        self._move_to(destination)
        self._show_location()
        self._show_commands()

    def _handle_travel(self, command: Command) -> None:
        destination = find_location(self.state.world, command.noun) if command.noun else ""
        if not destination or destination not in self.state.visited:
            self._error("You can't travel there. You either haven't discovered it or it doesn't exist.")
            return
        self._move_to(destination)
        self._say(f"You travel to the {self.state.here.name}.")
        self._show_location()
        self._show_commands()

    def _handle_look(self, command: Command) -> None:
        here = self.state.here
        self._show_location()
        if here.items:
            self._say("You also see: " + ", ".join(here.items) + ".", Category.HELP)
        self._show_commands()

    def _handle_examine(self, command: Command) -> None:
        item = command.noun
        here = self.state.here
        visible = item in here.items or (item == "cellar door" and self.state.location == POKER_LOCATION)
        if item and visible:
            self._say(EXAMINE_TEXT.get(item, f"Nothing remarkable about the {item}."), Category.STORY)
        elif item and item in self.state.inventory:
            self._say(f"You already have the {item} in your inventory.", Category.STORY)
        else:
            self._error(f"There is no '{item}' here to examine.")

    def _handle_get(self, command: Command) -> None:
        item = command.noun
        here = self.state.here
        if not item or item not in here.items:
            self._error(f"There is no '{item}' here to take.")
            return
        if item in SCENERY:
            self._error(f"You can't take the {item}.")
            return
        here.items.remove(item)
        self.state.inventory.append(item)
        self._say(f"You take the {item}.")

    def _handle_inventory(self, command: Command) -> None:
        state = self.state
        if state.inventory:
            self._say("Your inventory contains: " + ", ".join(state.inventory))
        else:
            self._say("Your inventory is empty.")
        if state.money > 0:
            self._say(f"You have ${state.money}.")

    def _handle_help(self, command: Command) -> None:
        self._say("Available commands:", Category.HELP)
        for entry in (
            "go [direction]",
            "travel [location]",
            "look",
            "examine [item]",
            "get [item]",
            "trade [item] (at the bar)",
            "inventory",
            "play poker",
            "drink [item]",
            "unlock [thing]",
            "die",
        ):
            self._say(f" - {entry}", Category.HELP)

    def _handle_trade(self, command: Command) -> None:
        state = self.state
        if state.location != "bar":
            self._error("This isn't the place for trading. Try the bar.")
            return
        if command.noun != "tarnished coin" or "tarnished coin" not in state.inventory:
            self._error("You can't trade that here, or you don't have it.")
            return
        state.inventory.remove("tarnished coin")
        state.money += self.config.trade_value
        self._say(
            "You slide the tarnished coin to the bartender. "
            f"He grunts and pushes a stack of ${self.config.trade_value} your way."
        )

    def _handle_ask(self, command: Command) -> None:
        if command.noun == "about the loop" and self.state.location == "bar":
            self._say(LOOP_LORE, Category.STORY)
        else:
            self._error("You can't ask about that here.")

    def _handle_talk(self, command: Command) -> None:
        target = command.noun[3:] if command.noun.startswith("to ") else command.noun
        if target in TALK_TEXT and self._is_present(target):
            self._say(TALK_TEXT[target], Category.STORY)
        else:
            self._error(f"There's no one called '{target}' to talk to here.")

    def _is_present(self, character: str) -> bool:
        if character == "bartender":
            return self.state.location == "bar"
        return character in self.state.here.items

    def _handle_quit(self, command: Command) -> None:
        self._reset_loop("You feel a cold jolt... and then, you're back on your horse, the town of Sligo before you once more.")

    def _handle_die(self, command: Command) -> None:
        self._reset_loop(DEATH_MESSAGES.get(self.state.location, DEFAULT_DEATH_MESSAGE))

    def _handle_drink(self, command: Command) -> None:
        item = command.noun
        here = self.state.here
        if item != "strange concoction" or item not in here.items:
            self._error(f"You can't drink the {item}.")
            return
        if self.rng.random() > self.config.drink_success_threshold:
            here.items.remove(item)
            self._say(
                "The concoction tastes of rust and copper. "
                "A strange vision flashes before your eyes: a hidden symbol on the cellar floor."
            )
        else:
            self._reset_loop("You drink the strange concoction. Your head spins, your vision blurs, and the world shatters.")

    def _handle_unlock(self, command: Command) -> None:
        if command.noun not in ("door", "cellar door"):
            self._error("Unlock what? It's best to be specific.")
            return
        if self.state.location != "cellar_door":
            self._error("You don't see a door to unlock here.")
            return
        if "tarnished coin" not in self.state.inventory:
            self._error("You examine the lock, but you don't have anything that fits the strange, coin-shaped slot.")
            return

        self.state.inventory.remove("tarnished coin")
        door = self.state.here
        door.description = "The heavy iron door is now unlocked. A dark staircase leads down into the cellar."
        door.exits["down"] = WIN_LOCATION
        if "unlock door" in door.actions:
            door.actions.remove("unlock door")
        self._say(
            "You kneel and insert the tarnished coin into the strange slot on the iron door. "
            "It fits perfectly. With a heavy *CLUNK*, the lock disengages."
        )
        self._say("The way down is now open.", Category.STORY)

    # Poker -----------------------------------------------------------

    def _handle_play(self, command: Command) -> None:
        state = self.state
        if command.noun != "poker" or "poker table" not in state.here.items:
            self._error("You can't play poker here.")
            return
        buy_in = self.config.table.buy_in
        if state.money < buy_in:
            self._error(
                f"You need at least ${buy_in} to join the game. The dealer won't let you sit. "
                "Maybe you can trade something of value at the bar."
            )
            return

        self._say("You sit down at the glowing poker table, facing a grim-faced dealer and two other players.")
        events = state.table.start_round(state.money, state.inventory)
        self._narrate(events)
        self._continue_round()

    def _handle_poker(self, command: Command) -> None:
        table = self.state.table
        action = _POKER_VERBS.get(command.verb)
        if action is None:
            self._error("Unknown poker command. Try 'check', 'bet', 'call', 'raise', 'wager', or 'fold'.")
            return

        amount: Optional[int] = None
        if action in (ActionType.BET, ActionType.RAISE):
            try:
                amount = int(command.noun)
            except ValueError:
                self._error(f"You must {action.value} a positive number.")
                return

        try:
            events = table.apply_action(PokerTable.HUMAN_SEAT, action, amount, item=command.noun or None)
        except IllegalAction as exc:
            self._error(str(exc))
            return
        self._narrate(events)
        self._continue_round(prompt=action != ActionType.WAGER)

    def _continue_round(self, prompt: bool = True) -> None:
        table = self.state.table
        self._narrate(table.run_npcs())
        if table.is_closed:
            self._settle_round()
        elif prompt:
            self._prompt_human()

    def _prompt_human(self) -> None:
        status = self.state.table.status()
        pot_status = f"Current pot: ${status['pot']}."
        if status["pot_items"]:
            pot_status += " Items in pot: " + ", ".join(status["pot_items"]) + "."
        self._say(pot_status)
        if status["community"]:
            self._say("Board: " + ", ".join(status["community"]))
        self._say(f"Current bet to call: ${status['to_call']}. You have ${status['stack']}.")
        self._say("Actions: check, bet [amt], call, raise [amt], wager [item], fold", Category.HELP)

    def _settle_round(self) -> None:
        state = self.state
        settlement = state.table.finish_round()
        state.money = settlement.human_stack
        state.inventory = settlement.human_items

        if state.money > 0:
            self._say("The game continues. Type 'play poker' to start the next hand.")
            self._show_location()
            self._show_commands()
        else:
            self._error("You're out of money and have been kicked out of the game.")
            self._reset_loop("You lost all your money at the poker table and were unceremoniously thrown out into the dust.")

    def _narrate(self, events: List[Event]) -> None:
        seats = self.state.table.seats
        round_over = False
        for event in events:
            kind = event["ev"]
            seat = seats[event["seat"]] if "seat" in event else None
            human = seat is not None and seat.is_human
            who = seat.name if seat is not None else ""

            if kind == "START":
                self._say(f"The game begins. {seats[event['button']].name} is the dealer.")
            elif kind == "POST_BLINDS":
                self._say(f"{seats[event['sb_seat']].name} posts the small blind of ${event['sb']}.")
                self._say(f"{seats[event['bb_seat']].name} posts the big blind of ${event['bb']}.")
            elif kind == "DEAL":
                self._say("The dealer deals the cards.")
                self._say("Your hand: " + ", ".join(event["cards"]))
                self._say(f"Your money: ${event['stack']}")
            elif kind == "FOLD":
                self._say("You fold your hand." if human else f"{who} folds.")
            elif kind == "CHECK":
                self._say("You check." if human else f"{who} checks.")
            elif kind == "CALL":
                if human:
                    self._say(f"You call ${event['amount']}. You have ${event['stack']} left.")
                else:
                    self._say(f"{who} calls.")
            elif kind == "BET":
                if human:
                    self._say(f"You bet ${event['amount']}. You have ${event['stack']} left.")
                else:
                    self._say(f"{who} bets ${event['amount']}.")
            elif kind == "RAISE":
                if human:
                    self._say(f"You raise to ${event['amount']}. You have ${event['stack']} left.")
                else:
                    self._say(f"{who} raises to ${event['amount']}.")
            elif kind == "WAGER":
                if human:
                    self._say(f"You toss your {event['item']} into the pot, raising the stakes.")
                else:
                    self._say(f"{who} smirks and throws their {event['item']} into the pot!")
            elif kind in ("FLOP", "TURN", "RIVER"):
                self._say(f"The {kind.title()} is dealt: " + ", ".join(event["board"]))
            elif kind == "SHOWDOWN":
                if not round_over:
                    round_over = True
                    self._say("--- Round Over ---", Category.STORY)
                    self._say("Showdown! Cards are revealed.")
                self._say(f"{who} has: {', '.join(event['hand'])} (Best hand: {event['rank']})")
            elif kind == "POT_AWARD":
                if not round_over:
                    round_over = True
                    self._say("--- Round Over ---", Category.STORY)
                names = " and ".join(seats[idx].name for idx in event["seats"])
                self._say(f"{names} win(s) the pot of ${event['amount']}!")
            elif kind == "ITEMS_AWARD":
                self._say(f"{who} also collects the wagered items: {', '.join(event['items'])}!")
            else:
                LOGGER.debug("Unnarrated poker event %s", kind)
