from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

from .cards import Card, build_deck, cards_to_labels, deal, shuffle
from .evaluator import Hand, best_hand, winners
from .models import ActionType, Phase, PlayerSeat, Pot, Settlement, TableConfig
from .npc import Decision, choose_item_wager, decide

LOGGER = logging.getLogger("gunslinger.poker")

Event = Dict[str, object]

# PokerTable keeps one saloon hand in memory. No text rendering lives here, only
# poker rules, chip and item accounting, and betting order. Callers turn the
# returned events into narration.


class IllegalAction(ValueError):
    """A betting command that the rules do not allow right now."""


@dataclass
class HandContext:
    # All mutable info about the current hand (deck, pot, actor queue, etc.).
    hand_id: int
    button: int
    deck: List[Card]
    community: List[Card] = field(default_factory=list)
    phase: Phase = Phase.PRE_FLOP
    round_index: int = 0
    pot: Pot = field(default_factory=Pot)
    current_bet: int = 0
    item_wagered: bool = False
    pending_callers: Set[int] = field(default_factory=set)
    actor_queue: Deque[int] = field(default_factory=deque)
    settlement: Optional[Settlement] = None


class PokerTable:
    """Four-handed Hold'em against the regulars of the Brimstone Bar."""

    HUMAN_SEAT = 0

    def __init__(self, config: Optional[TableConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or TableConfig()
        self.rng = rng or random.Random()
        self.seats: List[PlayerSeat] = []
        self.button = 0
        self.hand_counter = 0
        self.hand: Optional[HandContext] = None

    # Hand lifecycle --------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.hand is not None and self.hand.phase != Phase.ROUND_CLOSED

    @property
    def is_closed(self) -> bool:
        return self.hand is not None and self.hand.phase == Phase.ROUND_CLOSED

    def start_round(self, human_chips: int, human_items: Optional[List[str]] = None) -> List[Event]:
        if self.is_active:
            raise RuntimeError("Round already in progress")
        if human_chips < self.config.buy_in:
            raise IllegalAction(f"You need at least ${self.config.buy_in} to join the game.")

        self.seats = [
            PlayerSeat(
                seat=0,
                name=self.config.human_name,
                stack=human_chips,
                is_human=True,
                items=list(human_items or []),
            )
        ]
        for idx, profile in enumerate(self.config.npcs, start=1):
            self.seats.append(PlayerSeat(seat=idx, name=profile.name, stack=profile.chips, items=list(profile.items)))

        deck = build_deck()
        shuffle(deck, self.rng)
        self.button = (self.button + 1) % self.config.seats
        self.hand_counter += 1

        ctx = HandContext(hand_id=self.hand_counter, button=self.button, deck=deck)
        self.hand = ctx
        events: List[Event] = [{"ev": "START", "hand_id": ctx.hand_id, "button": ctx.button}]
        events.extend(self._post_blinds(ctx))
        events.extend(self._deal_hole_cards(ctx))

        ctx.pending_callers = {seat.seat for seat in self.seats if seat.stack > 0}
        bb_seat = (ctx.button + 2) % self.config.seats
        ctx.actor_queue = deque(self._rotation_from(bb_seat + 1))
        self._sync_queue(ctx)
        LOGGER.info("Hand %s started (button=%s, human stack=%s)", ctx.hand_id, ctx.button, human_chips)
        return events

    def _post_blinds(self, ctx: HandContext) -> List[Event]:
        sb_seat = self.seats[(ctx.button + 1) % self.config.seats]
        bb_seat = self.seats[(ctx.button + 2) % self.config.seats]
        sb_paid = self._commit_chips(sb_seat, self.config.sb, ctx)
        bb_paid = self._commit_chips(bb_seat, self.config.bb, ctx)
        ctx.current_bet = self.config.bb
        return [
            {
                "ev": "POST_BLINDS",
                "sb_seat": sb_seat.seat,
                "bb_seat": bb_seat.seat,
                "sb": sb_paid,
                "bb": bb_paid,
            }
        ]

    def _deal_hole_cards(self, ctx: HandContext) -> List[Event]:
        # Two cards per seat in seat order, human first.
        for seat in self.seats:
            seat.hole_cards = deal(ctx.deck, 2)
        human = self.seats[self.HUMAN_SEAT]
        return [{"ev": "DEAL", "seat": human.seat, "cards": cards_to_labels(human.hole_cards), "stack": human.stack}]

    def _rotation_from(self, start: int) -> List[int]:
        seats = []
        for offset in range(self.config.seats):
            idx = (start + offset) % self.config.seats
            if not self.seats[idx].has_folded:
                seats.append(idx)
        return seats

    def _sync_queue(self, ctx: HandContext) -> None:
        """Drop seats that can no longer act and bring the next pending seat to the front."""
        ctx.actor_queue = deque(
            idx for idx in ctx.actor_queue if not self.seats[idx].has_folded and self.seats[idx].stack > 0
        )
        for _ in range(len(ctx.actor_queue)):
            if ctx.actor_queue[0] in ctx.pending_callers:
                return
            ctx.actor_queue.rotate(-1)

    def _commit_chips(self, seat: PlayerSeat, amount: int, ctx: HandContext) -> int:
        amount = min(amount, seat.stack)
        seat.stack -= amount
        seat.committed += amount
        ctx.pot.chips += amount
        return amount

    def _active_seats(self) -> List[int]:
        return [seat.seat for seat in self.seats if not seat.has_folded]

    def _require_hand(self) -> HandContext:
        if not self.is_active:
            raise RuntimeError("No betting round in progress")
        assert self.hand is not None
        return self.hand

    # Action handling -------------------------------------------------

    def next_actor(self) -> Optional[int]:
        if not self.is_active:
            return None
        assert self.hand is not None
        self._sync_queue(self.hand)
        queue = self.hand.actor_queue
        if queue and queue[0] in self.hand.pending_callers:
            return queue[0]
        return None

    def to_call(self, seat_idx: int) -> int:
        ctx = self._require_hand()
        return max(ctx.current_bet - self.seats[seat_idx].committed, 0)

    def legal_actions(self, seat_idx: int) -> List[ActionType]:
        ctx = self._require_hand()
        seat = self.seats[seat_idx]
        if seat.has_folded:
            raise RuntimeError("Seat not active")

        legal: List[ActionType] = [ActionType.FOLD]
        if ctx.current_bet > seat.committed:
            legal.append(ActionType.CALL)
        else:
            legal.append(ActionType.CHECK)
        if ctx.current_bet == 0:
            legal.append(ActionType.BET)
        elif seat.stack + seat.committed >= ctx.current_bet * 2:
            legal.append(ActionType.RAISE)
        if seat.items:
            legal.append(ActionType.WAGER)
        return legal

    def apply_action(
        self,
        seat_idx: int,
        action: ActionType,
        amount: Optional[int] = None,
        item: Optional[str] = None,
    ) -> List[Event]:
        ctx = self._require_hand()
        if seat_idx != self.next_actor():
            raise RuntimeError(f"Seat {seat_idx} acted out of turn")
        seat = self.seats[seat_idx]
        events: List[Event] = []

        # Every branch validates before touching state so a rejected action changes nothing.
        if action == ActionType.FOLD:
            seat.has_folded = True
            ctx.pending_callers.discard(seat_idx)
            events.append({"ev": "FOLD", "seat": seat_idx})
        elif action == ActionType.CHECK:
            if ctx.current_bet > seat.committed:
                raise IllegalAction("You can't check, there is a bet to you. Try 'call' or 'raise'.")
            ctx.pending_callers.discard(seat_idx)
            events.append({"ev": "CHECK", "seat": seat_idx})
        elif action == ActionType.CALL:
            owed = ctx.current_bet - seat.committed
            if owed <= 0:
                raise IllegalAction("There is no bet to call. You can 'check' or 'bet'.")
            paid = self._commit_chips(seat, owed, ctx)
            seat.last_bet = paid
            ctx.pending_callers.discard(seat_idx)
            events.append({"ev": "CALL", "seat": seat_idx, "amount": paid, "stack": seat.stack})
        elif action in (ActionType.BET, ActionType.RAISE):
            self._validate_wager_amount(ctx, seat, action, amount)
            assert amount is not None
            paid = self._commit_chips(seat, amount - seat.committed, ctx)
            seat.last_bet = paid
            ctx.current_bet = amount
            ctx.pending_callers = {
                idx for idx in self._active_seats() if idx != seat_idx and self.seats[idx].stack > 0
            }
            events.append({"ev": action.name, "seat": seat_idx, "amount": amount, "stack": seat.stack})
        elif action == ActionType.WAGER:
            if not item or item not in seat.items:
                raise IllegalAction(f"You don't have a '{item or ''}' in your inventory.")
            seat.items.remove(item)
            ctx.pot.items.append(item)
            events.append({"ev": "WAGER", "seat": seat_idx, "item": item})
            if seat.is_human:
                # Throwing in an item is a side bet; the human still owes a betting action.
                return events
            ctx.item_wagered = True
        else:
            raise IllegalAction(f"Unsupported action {action}")

        if action != ActionType.WAGER:
            seat.last_action = action
        if seat.stack == 0:
            ctx.pending_callers.discard(seat_idx)

        LOGGER.debug("Seat %s %s (pot=%s, bet=%s)", seat_idx, action.value, ctx.pot.chips, ctx.current_bet)
        events.extend(self._advance_after_action(ctx))
        return events

    def _validate_wager_amount(
        self, ctx: HandContext, seat: PlayerSeat, action: ActionType, amount: Optional[int]
    ) -> None:
        if amount is None or amount <= 0:
            raise IllegalAction(f"You must {action.value} a positive number.")
        if action == ActionType.BET and ctx.current_bet > 0:
            raise IllegalAction(f"There is already a bet of ${ctx.current_bet}. Try 'call' or 'raise'.")
        if action == ActionType.RAISE and amount < ctx.current_bet * 2:
            raise IllegalAction(f"A raise must be at least double the current bet of ${ctx.current_bet}.")
        if amount - seat.committed > seat.stack:
            raise IllegalAction("You don't have enough money.")

    def _advance_after_action(self, ctx: HandContext) -> List[Event]:
        active = self._active_seats()
        if len(active) == 1:
            return self._award_uncontested(ctx, active[0])

        if ctx.actor_queue:
            ctx.actor_queue.rotate(-1)
        self._sync_queue(ctx)

        if not ctx.pending_callers:
            return self._advance_phase(ctx)
        return []

    def _advance_phase(self, ctx: HandContext) -> List[Event]:
        events: List[Event] = []

        while True:
            if ctx.phase == Phase.PRE_FLOP:
                ctx.phase = Phase.FLOP
                cards = deal(ctx.deck, 3)
            elif ctx.phase == Phase.FLOP:
                ctx.phase = Phase.TURN
                cards = deal(ctx.deck, 1)
            elif ctx.phase == Phase.TURN:
                ctx.phase = Phase.RIVER
                cards = deal(ctx.deck, 1)
            else:
                ctx.phase = Phase.SHOWDOWN
                events.extend(self._resolve_showdown(ctx))
                return events

            ctx.round_index += 1
            ctx.community.extend(cards)
            events.append(
                {
                    "ev": ctx.phase.value,
                    "cards": cards_to_labels(cards),
                    "board": cards_to_labels(ctx.community),
                }
            )

            for seat in self.seats:
                seat.reset_for_round()
            ctx.current_bet = 0
            ctx.pending_callers = {idx for idx in self._active_seats() if self.seats[idx].stack > 0}
            if len(ctx.pending_callers) > 1:
                ctx.actor_queue = deque(self._rotation_from(ctx.button + 1))
                self._sync_queue(ctx)
                return events

            # At most one player can still bet: run the board out.
            ctx.pending_callers.clear()

    def run_npcs(self) -> List[Event]:
        """Play NPC turns until the human must act or the round closes."""
        events: List[Event] = []
        guard = 0
        while self.is_active:
            actor = self.next_actor()
            if actor is None:
                raise RuntimeError("Betting round stalled with no one to act")
            if self.seats[actor].is_human:
                break
            events.extend(self._npc_turn(actor))
            guard += 1
            if guard > 500:
                raise RuntimeError("NPC turns did not converge")
        return events

    def _npc_turn(self, seat_idx: int) -> List[Event]:
        ctx = self._require_hand()
        seat = self.seats[seat_idx]

        item = choose_item_wager(seat, ctx.community, ctx.item_wagered)
        if item is not None:
            return self.apply_action(seat_idx, ActionType.WAGER, item=item)

        decision = decide(
            seat.hole_cards,
            ctx.community,
            current_bet=ctx.current_bet,
            to_call=self.to_call(seat_idx),
            pot=ctx.pot.chips,
            chips=seat.stack,
            rng=self.rng,
        )
        action, amount = self._normalize(ctx, seat, decision)
        return self.apply_action(seat_idx, action, amount)

    def _normalize(self, ctx: HandContext, seat: PlayerSeat, decision: Decision) -> tuple[ActionType, Optional[int]]:
        """Bend a policy decision into a legal action for the current table."""
        owed = ctx.current_bet - seat.committed
        action = decision.action

        if action in (ActionType.BET, ActionType.RAISE):
            ceiling = seat.stack + seat.committed
            if ctx.current_bet == 0:
                target = min(decision.amount or 0, ceiling)
                if target > 0:
                    return ActionType.BET, target
                return ActionType.CHECK, None
            target = min(max(decision.amount or 0, ctx.current_bet * 2), ceiling)
            if target >= ctx.current_bet * 2 and target > seat.committed:
                return ActionType.RAISE, target
            action = ActionType.CALL

        if action == ActionType.CALL and owed <= 0:
            return ActionType.CHECK, None
        if action == ActionType.FOLD and owed <= 0:
            return ActionType.CHECK, None
        if action == ActionType.CHECK and owed > 0:
            return ActionType.FOLD, None
        return action, None

    # Settlement ------------------------------------------------------

    def _award_uncontested(self, ctx: HandContext, seat_idx: int) -> List[Event]:
        winner = self.seats[seat_idx]
        events: List[Event] = [{"ev": "POT_AWARD", "seats": [seat_idx], "amount": ctx.pot.chips, "share": ctx.pot.chips}]
        chips = ctx.pot.chips
        winner.stack += chips
        events.extend(self._award_items(ctx, seat_idx))
        self._close(ctx, [seat_idx], chips, chips, 0)
        return events

    def _resolve_showdown(self, ctx: HandContext) -> List[Event]:
        events: List[Event] = []
        board = list(ctx.community)

        hands: List[tuple[int, Hand]] = []
        for seat_idx in self._active_seats():
            seat = self.seats[seat_idx]
            hand = best_hand(seat.hole_cards + board)
            hands.append((seat_idx, hand))
            events.append(
                {
                    "ev": "SHOWDOWN",
                    "seat": seat_idx,
                    "hand": cards_to_labels(seat.hole_cards),
                    "best": cards_to_labels(hand.cards),
                    "rank": hand.name,
                }
            )

        top = winners(hands)
        chips = ctx.pot.chips
        # Odd chips are dropped, not handed to anyone.
        share, remainder = divmod(chips, len(top))
        for seat_idx in top:
            self.seats[seat_idx].stack += share
        events.append({"ev": "POT_AWARD", "seats": top, "amount": chips, "share": share, "remainder": remainder})
        events.extend(self._award_items(ctx, min(top)))
        self._close(ctx, top, chips, share, remainder)
        return events

    def _award_items(self, ctx: HandContext, seat_idx: int) -> List[Event]:
        if not ctx.pot.items:
            return []
        seat = self.seats[seat_idx]
        seat.items.extend(ctx.pot.items)
        return [{"ev": "ITEMS_AWARD", "seat": seat_idx, "items": list(ctx.pot.items)}]

    def _close(self, ctx: HandContext, top: List[int], chips: int, share: int, remainder: int) -> None:
        human = self.seats[self.HUMAN_SEAT]
        ctx.settlement = Settlement(
            winners=list(top),
            winner_names=[self.seats[idx].name for idx in top],
            chips_won=chips,
            share=share,
            remainder=remainder,
            items=list(ctx.pot.items),
            item_winner=min(top) if ctx.pot.items else None,
            human_stack=human.stack,
            human_items=list(human.items),
        )
        ctx.pot = Pot()
        ctx.phase = Phase.ROUND_CLOSED
        ctx.pending_callers.clear()
        ctx.actor_queue.clear()
        LOGGER.info(
            "Hand %s closed: winners=%s pot=%s share=%s dropped=%s",
            ctx.hand_id,
            ctx.settlement.winner_names,
            chips,
            share,
            remainder,
        )

    def finish_round(self) -> Settlement:
        """Hand the closed round's settlement to the caller and clear the table."""
        if not self.is_closed:
            raise RuntimeError("Round has not closed yet")
        assert self.hand is not None and self.hand.settlement is not None
        settlement = self.hand.settlement
        self.hand = None
        return settlement

    def abandon(self) -> None:
        if self.hand is not None:
            LOGGER.warning("Hand %s abandoned", self.hand.hand_id)
        self.hand = None

    # Snapshot helpers ------------------------------------------------

    def status(self, seat_idx: int = HUMAN_SEAT) -> Dict[str, object]:
        ctx = self._require_hand()
        seat = self.seats[seat_idx]
        return {
            "hand_id": ctx.hand_id,
            "phase": ctx.phase.value,
            "pot": ctx.pot.chips,
            "pot_items": list(ctx.pot.items),
            "current_bet": ctx.current_bet,
            "to_call": max(ctx.current_bet - seat.committed, 0),
            "stack": seat.stack,
            "hole": cards_to_labels(seat.hole_cards),
            "community": cards_to_labels(ctx.community),
            "legal": [action.value for action in self.legal_actions(seat_idx)],
        }
