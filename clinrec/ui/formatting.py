"""Display formatting for record fields."""

from datetime import datetime
from typing import Optional

EMPTY_PLACEHOLDER = "—"


def format_date(value: Optional[str]) -> str:
    """
    Format an ISO date string as "DD Mon YYYY".

    Example: "2024-02-19" -> "19 Feb 2024". Empty input renders as a dash and
    unparsable input is returned unchanged.
    """
    if not value:
        return EMPTY_PLACEHOLDER

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return value
    return parsed.strftime("%d %b %Y")
