"""
Creature property snapshot.

Conditions are matched against a flat, string-valued view of a
creature. The set of keys is fixed by EXTRACTORS.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Mapping

if TYPE_CHECKING:
    from battle_rewards.battle.models import Creature


PropertyExtractor = Callable[["Creature"], str]


def _stat_map(stats: Mapping[str, int], suffix: str) -> str:
    """Serialize a stat map as hp_iv=31,attack_iv=12,..."""
    return ",".join(f"{stat}_{suffix}={value}" for stat, value in stats.items())


def _flag(value: bool) -> str:
    return "true" if value else "false"


# Property name -> extractor. Names are lowercase.
EXTRACTORS: dict[str, PropertyExtractor] = {
    "species": lambda c: c.species,
    "type": lambda c: ",".join(c.types),
    "level": lambda c: str(c.level),
    "shiny": lambda c: _flag(c.shiny),
    "gender": lambda c: c.gender,
    "nature": lambda c: c.nature,
    "ability": lambda c: c.ability,
    "form": lambda c: c.form,
    "friendship": lambda c: str(c.friendship),
    "helditem": lambda c: c.held_item,
    "pokeball": lambda c: c.pokeball,
    "ivs": lambda c: _stat_map(c.ivs, "iv"),
    "evs": lambda c: _stat_map(c.evs, "ev"),
}

PROPERTY_NAMES = frozenset(EXTRACTORS)


def snapshot(creature: Creature) -> dict[str, str]:
    """Build the property view of a creature."""
    return {name: extract(creature) for name, extract in EXTRACTORS.items()}


def describe(properties: Mapping[str, str]) -> str:
    """One-line rendering for debug logs."""
    return " ".join(f"{key}={value}" for key, value in properties.items())
