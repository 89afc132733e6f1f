"""Pure converters from raw export cells to validated numbers, timestamps and actions."""

import math
import re
from datetime import datetime, timezone
from typing import Literal

import pandas as pd

Action = Literal["buy", "sell"]
ACTION_TOKENS = frozenset({"buy", "sell", "long", "short"})

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}\s*|\s*[A-Z]{3}$")
_IGNORED_NUMBER_CHARS = re.compile(r"[$€£¥₹\"'\s]")
_QUOTES = re.compile(r"[\"']")
_DAY_FIRST_PATTERNS = (
    re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})\s+(\d{1,2}):(\d{2})(?::(\d{2}))?$"),
    re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2})\s+(\d{1,2}):(\d{2})(?::(\d{2}))?$"),
)
_DATE_SEPARATOR = re.compile(r"\d[/.\-]\d")
_CALENDAR_DATE = re.compile(r"\d{1,4}[/.\-]\d{1,2}[/.\-]\d{1,4}|(?<![.\d])\d{4}")
_RELATIVE_DAY = re.compile(r"\b(?:now|today|tomorrow|yesterday)\b", re.IGNORECASE)


def parse_number(value: str, field_name: str, integer: bool = False) -> float | int:
    """Convert a broker number cell to float, or to a rounded int for counts.

    Currency symbols, three-letter currency codes, quotes and whitespace are
    dropped. When both `,` and `.` appear the right-most one is the decimal
    separator; a lone `,` is a European decimal comma; repeated `,` without
    `.` are thousands separators. Accounting negatives like `(12.50)` are
    accepted.
    """
    text = _CURRENCY_CODE.sub("", str(value).strip())
    text = _IGNORED_NUMBER_CHARS.sub("", text)
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif text.count(",") == 1:
        text = text.replace(",", ".")
    else:
        text = text.replace(",", "")
    try:
        number = float(text)
    except ValueError:
        number = math.nan
    if not math.isfinite(number):
        raise ValueError(f"Invalid {field_name}: {value}. Must be a valid number.")
    if negative:
        number = -number
    if integer:
        return math.floor(number + 0.5)
    return number


def _parse_day_first(text: str) -> datetime | None:
    """Parse `DD/MM/YY HH:mm` or `DD.MM.YY HH:mm` literally as UTC wall-clock time."""
    for pattern in _DAY_FIRST_PATTERNS:
        if match := pattern.match(text):
            day, month, year, hour, minute, second = match.groups()
            try:
                return datetime(
                    2000 + int(year),
                    int(month),
                    int(day),
                    int(hour),
                    int(minute),
                    int(second or 0),
                    tzinfo=timezone.utc,
                )
            except ValueError:
                return None
    return None


def _parse_generic(text: str) -> pd.Timestamp | None:
    """Parse any other absolute date string, assuming UTC for values without an offset.

    Time-only, weekday-only and relative values are refused, since pandas would
    complete them from the current clock.
    """
    if not _CALENDAR_DATE.search(text) or _RELATIVE_DAY.search(text):
        return None
    try:
        timestamp = pd.to_datetime(text, utc=True)
    except (ValueError, OverflowError):
        return None
    if pd.isna(timestamp):
        return None
    return timestamp


def _format_utc(moment: datetime) -> str:
    """Render a UTC moment as ISO 8601 with millisecond precision and `Z` suffix."""
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{moment.microsecond // 1000:03d}Z"


def parse_date(value: str, field_name: str) -> str:
    """Convert a broker date cell to a canonical UTC ISO 8601 string.

    Day-first two-digit-year formats are tried first; a match that is not a
    real calendar date (typically a US month-first export) falls through to
    the generic parser together with every other format.
    """
    text = _QUOTES.sub("", str(value)).strip()
    moment = _parse_day_first(text) or _parse_generic(text)
    if moment is None:
        raise ValueError(f"Invalid {field_name}: {value}. Must be a valid date.")
    return _format_utc(moment)


def looks_like_date(value: str) -> bool:
    """Return whether a cell has a date separator or a clock colon."""
    return bool(_DATE_SEPARATOR.search(value)) or ":" in value


def is_action_token(value: str) -> bool:
    """Return whether a cell is exactly one of the recognized action words."""
    return value.strip().lower() in ACTION_TOKENS


def classify_action(value: str) -> Action:
    """Map a broker action cell to `buy` or `sell`."""
    action = value.strip().lower()
    if "buy" in action or "long" in action:
        return "buy"
    if "sell" in action or "short" in action:
        return "sell"
    raise ValueError(f"Invalid Action: {value}. Must be buy, sell, long or short.")
