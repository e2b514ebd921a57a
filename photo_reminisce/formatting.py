"""
Date template formatting
"""

import re
from datetime import datetime

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
SHORT_MONTHS = [m[:3] for m in MONTHS]

# Templates used by the timestamp overlay
STANDARD_TEMPLATE = "'YY MM DD  HH:mm"
DATE_ONLY_TEMPLATE = "'YY MM DD"


def _twelve_hour(dt: datetime) -> int:
    return dt.hour % 12 or 12


# Alternation order matters: longer tokens are listed before their prefixes
TOKENS = {
    "YYYY": lambda d: str(d.year),
    "YY": lambda d: str(d.year)[-2:],
    "MMMM": lambda d: MONTHS[d.month - 1],
    "MMM": lambda d: SHORT_MONTHS[d.month - 1],
    "MM": lambda d: f"{d.month:02d}",
    "M": lambda d: str(d.month),
    "DD": lambda d: f"{d.day:02d}",
    "D": lambda d: str(d.day),
    "HH": lambda d: f"{d.hour:02d}",
    "H": lambda d: str(d.hour),
    "hh": lambda d: f"{_twelve_hour(d):02d}",
    "h": lambda d: str(_twelve_hour(d)),
    "mm": lambda d: f"{d.minute:02d}",
    "m": lambda d: str(d.minute),
    "ss": lambda d: f"{d.second:02d}",
    "s": lambda d: str(d.second),
    "A": lambda d: "AM" if d.hour < 12 else "PM",
    "a": lambda d: "am" if d.hour < 12 else "pm",
}

_TOKEN_RE = re.compile("|".join(TOKENS))
_BRACKET_RE = re.compile(r"\[([^\]]+)\]")
_PLACEHOLDER_RE = re.compile(r"§§(\d+)§§")


def format_date(date: datetime, template: str) -> str:
    """
    Format ``date`` with a moment-style token template.

    Text inside square brackets is copied verbatim, e.g.
    ``format_date(d, "[Taken] YYYY")`` -> ``"Taken 2024"``.
    """
    literals: list[str] = []

    def _stash(match: re.Match) -> str:
        literals.append(match.group(1))
        return f"§§{len(literals) - 1}§§"

    result = _BRACKET_RE.sub(_stash, template)
    result = _TOKEN_RE.sub(lambda m: TOKENS[m.group(0)](date), result)
    return _PLACEHOLDER_RE.sub(lambda m: literals[int(m.group(1))], result)


def template_for(format_name: str) -> str:
    """Template implied by a style's format setting"""
    if format_name == "dateOnly":
        return DATE_ONLY_TEMPLATE
    return STANDARD_TEMPLATE
