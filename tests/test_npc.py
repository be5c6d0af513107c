from poker.cards import parse_cards
from poker.models import ActionType, PlayerSeat
from poker.npc import Decision, choose_item_wager, decide

from .helpers import ScriptedRandom


def _decide(hole, board=(), *, current_bet=10, to_call=10, pot=15, chips=1000, draws=()):
    rng = ScriptedRandom(draws)
    decision = decide(
        parse_cards(hole),
        parse_cards(board),
        current_bet=current_bet,
        to_call=to_call,
        pot=pot,
        chips=chips,
        rng=rng,
    )
    assert not rng.draws, "expected every scripted draw to be consumed"
    return decision


def test_preflop_high_pocket_pair_raises_double():
    assert _decide(["9h", "9d"]) == Decision(ActionType.RAISE, 20)
    assert _decide(["Ah", "Ad"], current_bet=40, to_call=30) == Decision(ActionType.RAISE, 80)


def test_preflop_low_pair_does_not_raise():
    assert _decide(["8h", "8d"]) == Decision(ActionType.FOLD)
    assert _decide(["8h", "8d"], to_call=0) == Decision(ActionType.CHECK)


def test_preflop_calls_only_when_both_cards_are_high():
    assert _decide(["Qh", "Kd"]) == Decision(ActionType.CALL, 10)
    assert _decide(["Ah", "2d"]) == Decision(ActionType.FOLD)
    assert _decide(["Jh", "Ad"]) == Decision(ActionType.FOLD)


def test_strong_postflop_raises_half_the_pot_when_aggressive():
    decision = _decide(["Kh", "Kd"], ["Ks", "2c", "7d"], pot=100, draws=[0.5])
    assert decision == Decision(ActionType.RAISE, 50)


def test_strong_postflop_raise_is_capped_by_chips():
    decision = _decide(["Kh", "Kd"], ["Ks", "2c", "7d"], pot=100, chips=30, draws=[0.1])
    assert decision == Decision(ActionType.RAISE, 30)


def test_strong_postflop_calls_when_not_aggressive():
    decision = _decide(["Kh", "Kd"], ["Ks", "2c", "7d"], pot=100, draws=[0.9])
    assert decision == Decision(ActionType.CALL, 10)


def test_one_pair_folds_to_big_bet_on_low_draw():
    decision = _decide(["Kh", "2d"], ["Ks", "9c", "7d"], to_call=60, pot=100, draws=[0.3])
    assert decision == Decision(ActionType.FOLD)


def test_one_pair_calls_big_bet_on_high_draw():
    decision = _decide(["Kh", "2d"], ["Ks", "9c", "7d"], to_call=60, pot=100, draws=[0.7])
    assert decision == Decision(ActionType.CALL, 60)


def test_one_pair_calls_small_bet_without_drawing():
    decision = _decide(["Kh", "2d"], ["Ks", "9c", "7d"], to_call=10, pot=100)
    assert decision == Decision(ActionType.CALL, 10)


def test_weak_hand_bluffs_a_third_of_the_pot():
    decision = _decide(["2h", "4d"], ["Ks", "9c", "7d"], to_call=0, current_bet=0, pot=90, draws=[0.05])
    assert decision == Decision(ActionType.BET, 30)


def test_weak_hand_checks_when_not_bluffing():
    decision = _decide(["2h", "4d"], ["Ks", "9c", "7d"], to_call=0, current_bet=0, pot=90, draws=[0.5])
    assert decision == Decision(ActionType.CHECK)


def test_weak_hand_folds_facing_a_bet_without_drawing():
    decision = _decide(["2h", "4d"], ["Ks", "9c", "7d"], to_call=20, pot=90)
    assert decision == Decision(ActionType.FOLD)


def test_item_wager_requires_two_pair_and_an_unwagered_round():
    seat = PlayerSeat(seat=2, name="The Jackal", stack=1500, items=["ornate gun"])
    seat.hole_cards = parse_cards(["Kc", "Kd"])
    flop = parse_cards(["Kh", "2c", "2d"])

    assert choose_item_wager(seat, flop, item_wagered=False) == "ornate gun"
    assert choose_item_wager(seat, flop, item_wagered=True) is None
    assert choose_item_wager(seat, [], item_wagered=False) is None

    seat.items = []
    assert choose_item_wager(seat, flop, item_wagered=False) is None


def test_one_pair_pressure_counts_only_what_is_still_owed():
    decision = _decide(["Kh", "2d"], ["Ks", "9c", "7d"], current_bet=60, to_call=10, pot=100)
    assert decision == Decision(ActionType.CALL, 10)
