"""Display formatting helpers for user records.

Call context:
    ``UserRow`` and ``UserDetailSession`` call these helpers to turn raw
    record fields into label text.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def format_long_date(iso_ts: Optional[str]) -> str:
    """Render an ISO timestamp as ``Month D, YYYY``; unparsable text is returned as-is."""
    if not iso_ts:
        return ""
    text = iso_ts.strip()
    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        dt = datetime.fromisoformat(normalized)
    except ValueError:
        return text
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def location_label(city: str, country: str) -> str:
    return f"{city}, {country}"


def age_location_label(age: int, city: str, country: str) -> str:
    return f"{age} years old • {location_label(city, country)}"


def capitalized(text: str) -> str:
    """Capitalize each word (``"female"`` -> ``"Female"``)."""
    return " ".join(part[:1].upper() + part[1:].lower() for part in text.split(" "))


__all__ = ["age_location_label", "capitalized", "format_long_date", "location_label"]
