"""Static story data for Sligo and the Brimstone Bar.

``LOCATIONS`` holds the pristine templates. A fresh deep copy is built on
every loop so taken items and unlocked doors never leak into the next life.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List

START_LOCATION = "sligo_outskirts"
WIN_LOCATION = "cellar"
POKER_LOCATION = "saloon_main_room"

# Things that can be examined but never carried off.
SCENERY = frozenset({"poker table", "cellar door", "general store", "gnome"})


@dataclass
class Location:
    id: str
    name: str
    description: str
    exits: Dict[str, str] = field(default_factory=dict)
    items: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)


LOCATIONS: Dict[str, Location] = {
    loc.id: loc
    for loc in (
        Location(
            id="sligo_outskirts",
            name="Sligo Outskirts",
            description=(
                "At the top of Gunslinger Loop.\n"
                "This wicked geographical accident waves to the heavens like a muddy pitch lasso.\n"
                "Every trail leads down east into Sligo."
            ),
            exits={"east": "sligo_main_road"},
            actions=["die"],
        ),
        Location(
            id="sligo_main_road",
            name="Main Road",
            description=(
                "Sligo ain't much of a town really, just Brimstone to the north and a small store to the south.\n"
                "To the west, you can see a fragment of sky through Gunslinger Loop.\n"
                "Can't keep going east without a horse and a gun."
            ),
            exits={"west": "sligo_outskirts", "north": "saloon_main_room", "south": "general_store"},
            items=["general store"],
            actions=["examine general store", "die"],
        ),
        Location(
            id="saloon_main_room",
            name="Brimstone Bar",
            description=(
                "The Brimstone Bar is a place drowning in smoke and music.\n"
                "The whiskey soothes the patrons' violent temperament.\n"
                "A long, pitch-black bar runs along the north wall.\n"
                "An open alley facing east. The locked cellar to the west.\n"
                "Exit is south."
            ),
            exits={"east": "back_alley", "north": "bar", "west": "cellar_door", "south": "sligo_main_road"},
            items=["poker table"],
            actions=["examine poker table", "play poker", "die"],
        ),
        Location(
            id="bar",
            name="Bar",
            description=(
                "The bar is made of what looks like polished obsidian.\n"
                "Behind it, a bartender with glowing red eyes polishes a chalice.\n"
                "A few bottles of strange concoctions line the shelves.\n"
                "The main room is back to the south."
            ),
            exits={"south": "saloon_main_room"},
            items=["strange concoction"],
            actions=["talk to bartender", "die"],
        ),
        Location(
            id="back_alley",
            name="Back Alley",
            description=(
                "The alley is dark and grimy.\n"
                "A tarnished coin lies in a puddle of waste that sizzles when you get close.\n"
                "The main room is back to the west."
            ),
            exits={"west": "saloon_main_room"},
            items=["tarnished coin"],
            actions=["get tarnished coin", "die"],
        ),
        Location(
            id="cellar_door",
            name="Cellar Door",
            description="A heavy, iron door is set into the floor. It's locked. The main room is back to the east.",
            exits={"east": "saloon_main_room"},
            items=["cellar door"],
            actions=["unlock door", "die"],
        ),
        Location(
            id="general_store",
            name="General Store",
            description=(
                "The general store is a chaotic mess of goods. Shelves are lined with strange, otherworldly items. "
                "An old, gnomish-looking proprietor with a long beard and a friendly grin stands behind the counter. "
                "The main road is to the north."
            ),
            exits={"north": "sligo_main_road"},
            items=["gnome", "strange trinkets"],
            actions=["talk to gnome", "examine strange trinkets", "die"],
        ),
        Location(
            id="cellar",
            name="Cellar",
            description=(
                "You've entered the cellar.\n"
                "Through the dim light, you see something you don't want to see.\n"
                "The two small bodies lie in embrace, disposed of and forgotten.\n"
                "You were too late.\n"
                "On the walls, written in grime:\n"
                "'You have found the truth. The loop is broken. Now you are free.'"
            ),
        ),
    )
}

DEATH_MESSAGES: Dict[str, str] = {
    "sligo_outskirts": "You step off the cliff edge, plummeting into a comically named chasm.",
    "sligo_main_road": (
        "A wild-eyed outlaw draws his pistol and fires. "
        "You feel an oozing red hole near your spleen before the world dissolves."
    ),
    "saloon_main_room": "You challenge the entire room. They win.",
    "bar": (
        "You sit at the obsidian bar for a drink...And forget how to stop.\n"
        "The bartender seems to grow stronger each passing day as you drink yourself to death."
    ),
    "back_alley": (
        "You slip and fall head-first into the sizzling puddle. "
        "The last thing you see is the tarnished coin floating above you."
    ),
    "cellar_door": (
        "You try to pry the heavy iron door open with your bare hands, and it snaps shut on your fingers. "
        "The pain is too much. You fall into darkness."
    ),
    "general_store": (
        "You slap the gnome proprietor. He just blows a raspberry, and a strange wave of energy hits you. "
        "You turn to stone forever."
    ),
}
DEFAULT_DEATH_MESSAGE = "You feel your will to go on fade, and the world dissolves into darkness."

EXAMINE_TEXT: Dict[str, str] = {
    "poker table": (
        "The poker table is surrounded by figures who look hauntingly familiar. "
        "The chips glow with a sickly green light."
    ),
    "strange concoction": "A bottle of dark, swirling liquid. It smells faintly of sulphur.",
    "tarnished coin": "A heavy, iron coin, encrusted with rust. It looks like it might fit a slot somewhere.",
    "cellar door": "A heavy, iron door with a strange coin slot. It's too sturdy to break open.",
    "general store": "The general store is full of strange goods. The proprietor looks like he's seen a thing or two.",
    "gnome": "The gnome proprietor has a long, white beard and a surprisingly cheerful disposition.",
    "strange trinkets": "These trinkets look like they're from another dimension. They're not for sale... yet.",
    "glowing rock": "A smooth, grey rock that pulses with a faint, internal light. It feels warm to the touch.",
}

TALK_TEXT: Dict[str, str] = {
    "bartender": (
        "The bartender sets down the chalice. 'Whiskey or the table, stranger. "
        "Coin talks louder than you do.'"
    ),
    "gnome": "The gnome grins. 'Come back when the world has turned a few more times. I'll have something for you.'",
}

LOOP_LORE = (
    "You ask the bartender about the repeating day. He stops polishing the chalice and his glowing eyes fix on you. "
    "'Some souls are too stubborn to pass on,' he rasps. 'They get stuck. Like a record skipping.' "
    "He gestures to the poker table. 'Some try to win their way out. Others just... fade.'"
)


def build_world() -> Dict[str, Location]:
    return copy.deepcopy(LOCATIONS)


def apply_loop_changes(world: Dict[str, Location], loop: int) -> List[str]:
    """Layer the narrative deltas unlocked by ``loop`` onto a fresh world. Returns flavour lines."""
    notes: List[str] = []
    if loop >= 2:
        world["bar"].actions.append("ask about the loop")
        notes.append("A strange sense of deja vu washes over you. You feel like you've learned something.")
    if loop >= 3:
        world["general_store"].items.append("glowing rock")
        notes.append("The world feels slightly different this time. A new energy emanates from the General Store.")
    return notes


def find_location(world: Dict[str, Location], query: str) -> str:
    """Resolve a location by display name or id; empty string when unknown."""
    wanted = query.strip().lower()
    for loc in world.values():
        if wanted in (loc.name.lower(), loc.id, loc.id.replace("_", " ")):
            return loc.id
    return ""
