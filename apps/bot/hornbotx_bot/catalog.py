# apps/bot/hornbotx_bot/catalog.py
"""
Every sound collection the bot knows about.

Clip files live in AUDIO_DIR as "<prefix>_<clip>.dca". Weights are relative:
higher means more likely to be picked when no clip is named.
"""

from __future__ import annotations

from typing import Final

from hornbotx_core.sounds import ClipSpec, CollectionSpec

AIRHORN: Final = CollectionSpec(
    prefix="airhorn",
    commands=("!airhorn",),
    clips=(
        ClipSpec("default", 1000),
        ClipSpec("reverb", 800),
        ClipSpec("spam", 800, post_delay_ms=0),
        ClipSpec("tripletap", 800),
        ClipSpec("fourtap", 800),
        ClipSpec("distant", 500),
        ClipSpec("echo", 500),
        ClipSpec("clownfull", 250),
        ClipSpec("clownshort", 250),
        ClipSpec("clownspam", 250, post_delay_ms=0),
        ClipSpec("highfartlong", 200),
        ClipSpec("highfartshort", 200),
        ClipSpec("midshort", 100),
        ClipSpec("truck", 10),
    ),
)

KHALED: Final = CollectionSpec(
    prefix="another",
    commands=("!anotha", "!anothaone"),
    clips=(
        ClipSpec("one", 1),
        ClipSpec("one_classic", 1),
        ClipSpec("one_echo", 1),
    ),
    chain_with="airhorn",
)

CENA: Final = CollectionSpec(
    prefix="jc",
    commands=("!johncena", "!cena"),
    clips=(
        ClipSpec("airhorn", 1),
        ClipSpec("echo", 1),
        ClipSpec("full", 1),
        ClipSpec("jc", 1),
        ClipSpec("nameis", 1),
        ClipSpec("spam", 1),
    ),
)

ETHAN: Final = CollectionSpec(
    prefix="ethan",
    commands=("!ethan", "!eb", "!ethanbradberry", "!h3h3"),
    clips=(
        ClipSpec("areyou_classic", 100),
        ClipSpec("areyou_condensed", 100),
        ClipSpec("areyou_crazy", 100),
        ClipSpec("areyou_ethan", 100),
        ClipSpec("classic", 100),
        ClipSpec("echo", 100),
        ClipSpec("high", 100),
        ClipSpec("slowandlow", 100),
        ClipSpec("cuts", 30),
        ClipSpec("beat", 30),
        ClipSpec("sodiepop", 1),
    ),
)

COW: Final = CollectionSpec(
    prefix="cow",
    commands=("!stan", "!stanislav"),
    clips=(
        ClipSpec("herd", 10),
        ClipSpec("moo", 10),
        ClipSpec("x3", 1),
    ),
)

BIRTHDAY: Final = CollectionSpec(
    prefix="birthday",
    commands=("!birthday", "!bday"),
    clips=(
        ClipSpec("horn", 50),
        ClipSpec("horn3", 30),
        ClipSpec("sadhorn", 25),
        ClipSpec("weakhorn", 25),
    ),
)

WOW: Final = CollectionSpec(
    prefix="wow",
    commands=("!wowthatscool", "!wtc"),
    clips=(ClipSpec("thatscool", 50),),
)

OKBUDDY: Final = CollectionSpec(
    prefix="okbuddy",
    commands=("!okbuddy", "!okaybuddy", "!okb"),
    clips=(
        ClipSpec("1", 50),
        ClipSpec("2", 50),
        ClipSpec("3", 50),
    ),
)

COLLECTIONS: Final = (
    AIRHORN,
    KHALED,
    CENA,
    ETHAN,
    COW,
    BIRTHDAY,
    WOW,
    OKBUDDY,
)
