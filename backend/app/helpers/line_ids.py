"""
Line identifier resolution for the TfL Line API.

The Journey Planner reports lines by display name ("Hammersmith & City",
"Elizabeth line", "London Overground") while the Line route-sequence endpoint
wants the TfL line id ("hammersmith-city", "elizabeth", "london-overground").

Resolution rule:
1. Look the lowercased, trimmed name up in LINE_ALIASES, built from the
   TransitLine enum and its known display spellings.
2. Otherwise lowercase, trim and hyphenate whitespace runs. This is how TfL
   derives the id for every line whose name is a single plain word
   ("Jubilee" -> "jubilee") and is a best guess for anything else.
3. Empty input resolves to None.
"""

from __future__ import annotations

import enum
import re

_WHITESPACE = re.compile(r"\s+")


class TransitLine(str, enum.Enum):
    """Rail lines served by the journey planner, valued by their TfL line id."""

    BAKERLOO = "bakerloo"
    CENTRAL = "central"
    CIRCLE = "circle"
    DISTRICT = "district"
    DLR = "dlr"
    ELIZABETH = "elizabeth"
    HAMMERSMITH_CITY = "hammersmith-city"
    JUBILEE = "jubilee"
    LONDON_OVERGROUND = "london-overground"
    METROPOLITAN = "metropolitan"
    NORTHERN = "northern"
    PICCADILLY = "piccadilly"
    VICTORIA = "victoria"
    WATERLOO_CITY = "waterloo-city"


# Display spellings seen in Journey Planner responses, per line
_DISPLAY_NAMES: dict[TransitLine, tuple[str, ...]] = {
    TransitLine.BAKERLOO: ("bakerloo",),
    TransitLine.CENTRAL: ("central",),
    TransitLine.CIRCLE: ("circle",),
    TransitLine.DISTRICT: ("district",),
    TransitLine.DLR: ("dlr",),
    TransitLine.ELIZABETH: ("elizabeth", "elizabeth line"),
    TransitLine.HAMMERSMITH_CITY: ("hammersmith & city", "hammersmith and city"),
    TransitLine.JUBILEE: ("jubilee",),
    TransitLine.LONDON_OVERGROUND: ("overground", "london overground"),
    TransitLine.METROPOLITAN: ("metropolitan",),
    TransitLine.NORTHERN: ("northern",),
    TransitLine.PICCADILLY: ("piccadilly",),
    TransitLine.VICTORIA: ("victoria",),
    TransitLine.WATERLOO_CITY: ("waterloo & city", "waterloo and city"),
}

LINE_ALIASES: dict[str, TransitLine] = {
    spelling: line for line, spellings in _DISPLAY_NAMES.items() for spelling in spellings
}


def resolve_line_id(display_name: str | None) -> str | None:
    """
    Resolve a line display name to the TfL line id.

    Examples:
        >>> resolve_line_id("Hammersmith & City")
        'hammersmith-city'
        >>> resolve_line_id("unknown line")
        'unknown-line'
        >>> resolve_line_id("") is None
        True
    """
    if not display_name or not display_name.strip():
        return None

    key = display_name.lower().strip()
    if line := LINE_ALIASES.get(key):
        return line.value
    return _WHITESPACE.sub("-", key)
