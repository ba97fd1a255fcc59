"""
Station name normalization and fuzzy matching helpers.

Station names reach us from three independently maintained TfL sources (the
StopPoint search, the Journey Planner and the Line route sequences), each with
its own suffixes and punctuation: "Bank Underground Station", "Bank", "Bank (DLR)".
These pure functions reduce a name to a canonical key and compare keys with an
ordered list of matcher strategies, so every comparison in the pipeline uses the
same rules.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

# Order matters: the most specific suffix has to go before the generic " station"
_MODAL_SUFFIXES = (
    " underground station",
    " dlr station",
    " elizabeth line station",
    " overground station",
    " rail station",
    " tram stop",
    " bus stop",
    " station",
)

_PARENTHETICAL = re.compile(r"\(.*?\)")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

# Display names the frontend shows without the redundant suffix
_LINE_NAME_CLEANUPS = {
    "elizabeth line": "Elizabeth",
    "london overground": "Overground",
}


def normalize_station_name(name: str | None) -> str:
    """
    Reduce a free-text station name to a canonical comparison key.

    Pure and total: None or empty input returns an empty string, and applying
    the function twice gives the same result as applying it once.

    Examples:
        >>> normalize_station_name("King's Cross St. Pancras Underground Station")
        'kings cross st pancras'
        >>> normalize_station_name("Stratford (London)")
        'stratford'
    """
    if not name:
        return ""

    key = _PARENTHETICAL.sub("", name.lower())
    key = _WHITESPACE.sub(" ", _NON_ALPHANUMERIC.sub("", key))
    # Repeat until stable so "x station station" and friends normalize in one pass
    stripped = None
    while stripped != key:
        stripped = key
        for suffix in _MODAL_SUFFIXES:
            key = key.replace(suffix, "", 1)
    return _WHITESPACE.sub(" ", key).strip()


def clean_line_name(raw: str | None) -> str | None:
    """
    Shorten TfL line names that carry a redundant suffix.

    Examples:
        >>> clean_line_name("Elizabeth line")
        'Elizabeth'
        >>> clean_line_name("Jubilee")
        'Jubilee'
    """
    if not raw:
        return raw
    return _LINE_NAME_CLEANUPS.get(raw.lower().strip(), raw)


# ==================== Matcher strategies ====================
#
# Each matcher is a pure predicate over two already-normalized keys. Empty keys
# never match, otherwise "" would be a prefix and a substring of every name.

NameMatcher = Callable[[str, str], bool]


def exact_match(candidate: str, target: str) -> bool:
    """Keys are identical."""
    return bool(candidate) and candidate == target


def prefix_match(candidate: str, target: str) -> bool:
    """Either key starts with the other ("paddington" vs "paddington hc")."""
    if not candidate or not target:
        return False
    return candidate.startswith(target) or target.startswith(candidate)


def substring_match(candidate: str, target: str) -> bool:
    """Either key contains the other ("bank" vs "bank monument")."""
    if not candidate or not target:
        return False
    return candidate in target or target in candidate


# Tried in order; the first tier that matches anywhere in a sequence wins
NAME_MATCHERS: tuple[NameMatcher, ...] = (exact_match, prefix_match, substring_match)


def find_stop_index(stops: Sequence[str], name: str) -> int | None:
    """
    Find the position of a station in a stop sequence using tiered fuzzy matching.

    Each matcher tier is applied to the whole sequence before falling back to
    the next, looser tier. Within a tier the first matching position wins.

    Args:
        stops: Ordered stop names (raw, not normalized)
        name: Station name to look for (raw, not normalized)

    Returns:
        Index of the matching stop, or None if no tier matches

    Examples:
        >>> find_stop_index(["Bank", "Shadwell", "Limehouse"], "Shadwell DLR Station")
        1
    """
    target = normalize_station_name(name)
    keys = [normalize_station_name(stop) for stop in stops]
    for matcher in NAME_MATCHERS:
        for index, key in enumerate(keys):
            if matcher(key, target):
                return index
    return None


def names_match(first: str | None, second: str | None) -> bool:
    """Return True if two station names match under any matcher tier."""
    a = normalize_station_name(first)
    b = normalize_station_name(second)
    return any(matcher(a, b) for matcher in NAME_MATCHERS)


def same_station(first: str | None, second: str | None) -> bool:
    """Return True if two station names normalize to the same key."""
    return normalize_station_name(first) == normalize_station_name(second)


def dedupe_station_names(names: Sequence[str]) -> list[str]:
    """Drop names whose normalized key was already seen, keeping first occurrences in order."""
    seen: set[str] = set()
    result = []
    for name in names:
        key = normalize_station_name(name)
        if key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result
