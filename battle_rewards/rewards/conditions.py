"""
Condition matching against creature property snapshots.

An expression is either `key:value` / `key=value`, matched as a
case-insensitive substring of the snapshot's value for `key`, or a
raw species tag, matched case-insensitively against `species`.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

SEPARATORS = (":", "=")

Condition = Union[str, Sequence[str]]


def _separator_index(expression: str) -> int:
    """Index of the first separator, -1 if none."""
    positions = [i for i in (expression.find(s) for s in SEPARATORS) if i != -1]
    return min(positions) if positions else -1


def _species_matches(tag: str, snapshot: Mapping[str, str]) -> bool:
    species: Optional[str] = snapshot.get("species")
    if species is None:
        logger.debug("  No species in snapshot for raw tag '%s'", tag)
        return False
    result = species.casefold() == tag.strip().casefold()
    logger.debug("  Raw tag '%s' == species '%s'? %s", tag, species, result)
    return result


def matches(expression: str, snapshot: Mapping[str, str]) -> bool:
    """
    Evaluate a single condition expression.

    Unknown keys fall back to a species tag comparison of the whole
    expression.
    """
    index = _separator_index(expression)
    if index == -1:
        return _species_matches(expression, snapshot)

    key = expression[:index].strip().lower()
    value = expression[index + 1:].strip()

    if key not in snapshot:
        logger.debug("  Key '%s' is not a known property, treating '%s' as raw tag", key, expression)
        return _species_matches(expression, snapshot)

    result = value.casefold() in snapshot[key].casefold()
    logger.debug("  '%s' (%s) contains '%s'? %s", key, snapshot[key], value, result)
    return result


def group_matches(condition: Condition, snapshot: Mapping[str, str]) -> bool:
    """A string entry is one predicate, a list entry is an AND-group."""
    if isinstance(condition, str):
        return matches(condition, snapshot)
    return all(
        isinstance(sub, str) and matches(sub, snapshot)
        for sub in condition
    )


def conditions_match(
    conditions: Sequence[Condition],
    snapshot: Mapping[str, str],
    blacklist: bool = False,
) -> bool:
    """
    Evaluate a reward's condition list.

    Entries are OR-ed together. An empty list always applies, whether
    or not it is a blacklist.
    """
    if not conditions:
        return True

    result = any(group_matches(c, snapshot) for c in conditions)
    return not result if blacklist else result
