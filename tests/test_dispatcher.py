import pytest

from adventure.commands import Verb, parse_command
from adventure.dispatcher import Game, roman
from adventure.output import Category
from adventure.state import GameConfig
from adventure.world import LOOP_LORE

from .helpers import ScriptedRandom, create_game, passive_npcs, play, rig_deck, texts

TO_ALLEY = ["e", "n", "e", "get tarnished coin"]
TO_BAR_WITH_COIN = TO_ALLEY + ["w", "n"]


def test_start_opens_first_loop_at_the_outskirts():
    game = Game(GameConfig(seed=3))
    lines = game.start()

    assert texts(lines)[0] == "Gunslinger Loop I"
    assert game.state.loop == 1
    assert game.state.location == "sligo_outskirts"
    assert game.state.money == 0
    assert any("Available commands" in text for text in texts(lines, Category.HELP))
    assert game.start() == []


def test_roman_numerals():
    assert [roman(n) for n in (1, 4, 9, 14, 40, 101)] == ["I", "IV", "IX", "XIV", "XL", "CI"]


def test_parse_command_expands_aliases_and_strips_parentheticals():
    assert parse_command("N").noun == "north"
    assert parse_command("go n").noun == "north"
    assert parse_command("pick up tarnished coin").verb == Verb.GET
    assert parse_command("x  poker   table").noun == "poker table"
    assert parse_command("go north (to Brimstone Bar)").noun == "north"
    assert parse_command("end it").verb == Verb.DIE
    assert parse_command("whistle").verb == Verb.UNKNOWN
    assert parse_command("   ").is_empty


def test_every_command_echoes_into_history():
    game = create_game()
    lines = game.process_command("look")
    assert lines[0].text == "> look"
    assert lines[0].category == Category.HISTORY


def test_empty_and_unknown_commands_are_errors():
    game = create_game()
    assert texts(game.process_command("  "), Category.ERROR) == ["Say something. Type 'help' for a list of commands."]
    assert texts(game.process_command("dance"), Category.ERROR) == ["I don't understand that command: 'dance'."]


def test_walking_and_blocked_exits():
    game = create_game()
    play(game, ["e", "n"])
    assert game.state.location == "saloon_main_room"
    assert game.state.visited == {"sligo_outskirts", "sligo_main_road", "saloon_main_room"}

    errors = texts(game.process_command("go up"), Category.ERROR)
    assert errors == ["You can't go that way."]
    assert game.state.location == "saloon_main_room"


def test_available_commands_list_every_exit():
    game = create_game()
    play(game, ["e", "n", "n"])
    commands = game.get_available_commands()
    assert "go south" in commands
    assert commands[0] == "go south"

    play(game, ["s"])
    commands = game.get_available_commands()
    for direction in ("east", "north", "west", "south"):
        assert f"go {direction}" in commands
    assert not [command for command in commands if "(" in command]
    assert "look at patrons" not in commands

    play(game, ["w"])
    assert game.get_available_commands()[:1] == ["go east"]


def test_take_coin_and_inventory():
    game = create_game()
    lines = play(game, TO_ALLEY)
    assert "You take the tarnished coin." in texts(lines)
    assert game.state.inventory == ["tarnished coin"]
    assert "tarnished coin" not in game.state.here.items

    assert "Your inventory contains: tarnished coin" in texts(game.process_command("i"))
    assert texts(game.process_command("get tarnished coin"), Category.ERROR) == [
        "There is no 'tarnished coin' here to take."
    ]


def test_scenery_cannot_be_taken_but_can_be_examined():
    game = create_game()
    play(game, ["e", "n"])
    assert texts(game.process_command("get poker table"), Category.ERROR) == ["You can't take the poker table."]
    story = texts(game.process_command("x poker table"), Category.STORY)
    assert story and "glow" in story[0]
    story = texts(game.process_command("examine cellar door"), Category.STORY)
    assert story and "coin slot" in story[0]


def test_travel_only_to_visited_locations():
    game = create_game()
    play(game, ["e", "n", "e"])

    lines = game.process_command("travel main road")
    assert "You travel to the Main Road." in texts(lines)
    assert game.state.location == "sligo_main_road"

    errors = texts(game.process_command("travel general store"), Category.ERROR)
    assert errors and "can't travel there" in errors[0]

    game.process_command("travel back alley")
    assert game.state.location == "back_alley"


def test_die_resets_loop_with_location_message():
    game = create_game()
    game.state.loop = 5
    play(game, TO_ALLEY)
    game.state.money = 250

    lines = game.process_command("die")

    assert "Gunslinger Loop VI" in texts(lines, Category.STORY)
    errors = texts(lines, Category.ERROR)
    assert errors and "sizzling puddle" in errors[0]
    assert game.state.loop == 6
    assert game.state.location == "sligo_outskirts"
    assert game.state.inventory == []
    assert game.state.money == 0
    assert "tarnished coin" in game.state.world["back_alley"].items


def test_quit_also_resets_the_loop():
    game = create_game()
    game.process_command("exit")
    assert game.state.loop == 2
    assert game.state.running


def test_loop_two_unlocks_questions_for_the_bartender():
    game = create_game()
    assert texts(game.process_command("ask about the loop"), Category.ERROR) == ["You can't ask about that here."]
    play(game, ["e", "n", "n"])
    assert "ask about the loop" not in game.get_available_commands()

    lines = game.process_command("die")
    assert any("deja vu" in text for text in texts(lines, Category.STORY))
    play(game, ["e", "n", "n"])
    assert "ask about the loop" in game.get_available_commands()
    assert LOOP_LORE in texts(game.process_command("ask about the loop"), Category.STORY)


def test_loop_three_puts_glowing_rock_in_the_store():
    game = create_game()
    play(game, ["die", "die", "e", "s"])
    assert game.state.loop == 3
    assert "glowing rock" in game.state.here.items
    assert "get glowing rock" in game.get_available_commands()
    assert "get gnome" not in game.get_available_commands()


def test_talk_to_characters_present():
    game = create_game()
    play(game, ["e", "s"])
    assert texts(game.process_command("talk to gnome"), Category.STORY)
    assert texts(game.process_command("talk to bartender"), Category.ERROR)


def test_trade_coin_for_money_at_the_bar():
    game = create_game()
    assert texts(play(game, TO_ALLEY + ["trade tarnished coin"]), Category.ERROR) == [
        "This isn't the place for trading. Try the bar."
    ]
    play(game, ["w", "n"])
    assert "trade tarnished coin" in game.get_available_commands()

    game.process_command("trade tarnished coin")

    assert game.state.money == 1000
    assert game.state.inventory == []
    assert "You have $1000." in texts(game.process_command("inventory"))


def test_drink_success_removes_the_concoction():
    game = create_game(rng=ScriptedRandom([0.9], seed=1))
    play(game, ["e", "n", "n"])

    lines = game.process_command("drink strange concoction")

    assert any("hidden symbol" in text for text in texts(lines))
    assert "strange concoction" not in game.state.here.items
    assert game.state.loop == 1


def test_drink_failure_resets_the_loop():
    game = create_game(rng=ScriptedRandom([0.1], seed=1))
    play(game, ["e", "n", "n"])

    lines = game.process_command("drink strange concoction")

    errors = texts(lines, Category.ERROR)
    assert errors and "world shatters" in errors[0]
    assert game.state.loop == 2
    assert game.state.location == "sligo_outskirts"


def test_unlock_needs_the_coin_and_opens_the_way_down():
    game = create_game()
    play(game, ["e", "n", "w"])
    errors = texts(game.process_command("unlock door"), Category.ERROR)
    assert errors and "coin-shaped slot" in errors[0]

    play(game, ["e", "e", "get tarnished coin", "w", "w"])
    lines = game.process_command("unlock door")
    assert "The way down is now open." in texts(lines, Category.STORY)
    assert game.state.inventory == []
    assert "go down" in game.get_available_commands()
    assert "unlock door" not in game.get_available_commands()


def test_going_down_into_the_cellar_breaks_the_loop():
    game = create_game()
    play(game, TO_ALLEY + ["w", "w", "unlock door"])

    lines = game.process_command("d")

    assert "--- YOU HAVE BROKEN THE LOOP ---" in texts(lines, Category.STORY)
    assert not game.state.running
    assert game.state.won
    assert texts(game.process_command("look"), Category.ERROR) == [
        "Game is not running. Start a new game to play again."
    ]


def test_play_poker_requires_the_buy_in():
    game = create_game()
    play(game, ["e", "n"])
    errors = texts(game.process_command("play poker"), Category.ERROR)
    assert errors and "at least $10" in errors[0]
    assert not game.state.in_poker_game


def test_poker_commands_are_routed_to_the_table_during_a_hand():
    game = create_game()
    play(game, TO_BAR_WITH_COIN + ["trade tarnished coin", "s"])

    lines = game.process_command("play poker")
    assert game.state.in_poker_game
    assert "Your money: $1000" in texts(lines)
    assert game.get_available_commands()[0] == "check"

    errors = texts(game.process_command("go north"), Category.ERROR)
    assert errors and errors[0].startswith("Unknown poker command")
    assert game.state.location == "saloon_main_room"

    errors = texts(game.process_command("raise 15"), Category.ERROR)
    assert errors == ["A raise must be at least double the current bet of $10."]
    assert game.state.table.status()["pot"] == 15

    assert texts(game.process_command("bet lots"), Category.ERROR) == ["You must bet a positive number."]
    assert texts(game.process_command("check"), Category.ERROR)

    lines = game.process_command("fold")
    assert "You fold your hand." in texts(lines)
    assert "--- Round Over ---" in texts(lines, Category.STORY)
    assert not game.state.in_poker_game
    assert game.state.money == 1000
    assert any("Type 'play poker'" in text for text in texts(lines))


def test_wagering_an_item_keeps_the_turn():
    game = create_game()
    play(game, TO_BAR_WITH_COIN + ["trade tarnished coin", "get strange concoction", "s"])
    game.process_command("play poker")

    lines = game.process_command("wager strange concoction")

    assert "You toss your strange concoction into the pot, raising the stakes." in texts(lines)
    assert game.state.table.next_actor() == 0
    assert game.state.table.status()["pot_items"] == ["strange concoction"]


def test_losing_everything_at_the_table_resets_the_loop(monkeypatch):
    rig_deck(
        monkeypatch,
        ["2h", "7c", "Ah", "Ad", "Kh", "Kd", "Qh", "Qd", "9s", "8s", "4c", "Jd", "3c"],
    )
    passive_npcs(monkeypatch)
    game = create_game()
    play(game, TO_BAR_WITH_COIN + ["trade tarnished coin", "s", "play poker"])

    lines = game.process_command("raise 1000")

    assert "Showdown! Cards are revealed." in texts(lines)
    assert "Dealer win(s) the pot of $3800!" in texts(lines)
    errors = texts(lines, Category.ERROR)
    assert "You're out of money and have been kicked out of the game." in errors
    assert game.state.loop == 2
    assert game.state.money == 0
    assert game.state.location == "sligo_outskirts"
    assert not game.state.in_poker_game


def test_lenient_mode_reports_invariant_errors(monkeypatch):
    game = create_game(strict=False)
    play(game, ["e", "n"])
    game.state.money = 100

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(game.state.table, "start_round", broken)
    errors = texts(game.process_command("play poker"), Category.ERROR)
    assert errors == ["The world shudders. That didn't work."]
    assert game.state.running


def test_strict_mode_raises_invariant_errors(monkeypatch):
    game = create_game()
    play(game, ["e", "n"])
    game.state.money = 100

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(game.state.table, "start_round", broken)
    with pytest.raises(RuntimeError, match="boom"):
        game.process_command("play poker")
