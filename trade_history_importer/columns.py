"""Header-driven resolution of broker export columns to trade fields."""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from trade_history_importer.normalizers import is_action_token

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date", "symbol", "price", "volume", "action")
DISPLAY_NAMES = {
    "date": "Open/Date",
    "symbol": "Symbol",
    "price": "Price",
    "volume": "Volume",
    "action": "Action/Type",
}
_REQUIRED_KEYWORDS = {
    "date": ("open", "date"),
    "symbol": ("symbol",),
    "price": ("price",),
    "volume": ("volume",),
    "action": ("action", "type"),
}


class MissingColumnsError(ValueError):
    """Raised when the header row lacks one or more required columns."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


@dataclass(frozen=True)
class ColumnMap:
    """Header labels backing each trade field for one import."""

    date: str
    symbol: str
    price: str
    volume: str
    action: str
    exit_price: str | None = None
    exit_date: str | None = None
    profit: str | None = None
    tags: str | None = None
    notes: str | None = None


def _find_header(headers: Sequence[str], matches: Callable[[str], bool]) -> str | None:
    """Return first header whose lower-cased label satisfies the predicate."""
    return next((header for header in headers if matches(header.lower())), None)


def _find_action_column(headers: Sequence[str], rows: Sequence[Mapping[str, str]]) -> str | None:
    """Return first column holding a bare buy/sell/long/short cell."""
    for header in headers:
        if any(is_action_token(row.get(header, "")) for row in rows):
            return header
    return None


def _is_exit_date_label(label: str) -> bool:
    """Match close date/time labels while excluding close price labels."""
    return "close" in label and ("date" in label or "time" in label) and "price" not in label


def resolve_columns(headers: Sequence[str], rows: Sequence[Mapping[str, str]]) -> ColumnMap:
    """Map header labels to trade fields, raising `MissingColumnsError` when incomplete."""
    found = {
        name: _find_header(
            headers,
            lambda label, keywords=keywords: any(keyword in label for keyword in keywords),
        )
        for name, keywords in _REQUIRED_KEYWORDS.items()
    }
    if found["action"] is None:
        found["action"] = _find_action_column(headers, rows)
    if missing := [DISPLAY_NAMES[name] for name in REQUIRED_FIELDS if found[name] is None]:
        raise MissingColumnsError(missing)
    column_map = ColumnMap(
        **found,
        exit_price=_find_header(headers, lambda label: "close" in label and "price" in label),
        exit_date=(
            _find_header(headers, _is_exit_date_label)
            or _find_header(headers, lambda label: label.strip() == "close")
        ),
        profit=_find_header(headers, lambda label: "profit" in label or "pnl" in label),
        tags=_find_header(headers, lambda label: "tag" in label),
        notes=_find_header(headers, lambda label: "note" in label),
    )
    logger.debug("Resolved columns: %s", column_map)
    return column_map
