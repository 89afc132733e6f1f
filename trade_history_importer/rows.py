"""Conversion of one resolved export row into a normalized trade."""

from collections.abc import Mapping

from trade_history_importer.columns import DISPLAY_NAMES, ColumnMap
from trade_history_importer.config import ImporterSettings, Trade
from trade_history_importer.normalizers import (
    classify_action,
    looks_like_date,
    parse_date,
    parse_number,
)


class RowError(ValueError):
    """Raised when a single data row cannot be converted to a trade."""

    def __init__(self, row: int, message: str) -> None:
        self.row = row
        super().__init__(f"Row {row}: {message}")


class TradeRowBuilder:
    """Build trades from label-to-cell row mappings using one column map."""

    def __init__(self, column_map: ColumnMap, settings: ImporterSettings | None = None) -> None:
        """Store column map and defaults shared by every row of one import."""
        self.column_map = column_map
        self.settings = settings or ImporterSettings()

    def build(self, row: Mapping[str, str], row_number: int, trade_id: str) -> Trade:
        """Return trade for one data row, raising `RowError` on any invalid cell."""
        try:
            return self._build(row, trade_id)
        except ValueError as error:
            raise RowError(row_number, str(error)) from error

    def _cell(self, row: Mapping[str, str], label: str | None) -> str:
        """Return trimmed cell for a resolved label, or empty string when unresolved."""
        if label is None:
            return ""
        return row.get(label, "").strip()

    def _build(self, row: Mapping[str, str], trade_id: str) -> Trade:
        """Convert cells to a trade, letting normalizer errors propagate."""
        columns = self.column_map
        if missing := [
            DISPLAY_NAMES[name]
            for name in ("symbol", "action")
            if not self._cell(row, getattr(columns, name))
        ]:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        action = classify_action(self._cell(row, columns.action))
        symbol = self._cell(row, columns.symbol).upper()
        entry_price = float(parse_number(self._cell(row, columns.price), columns.price))
        quantity = int(parse_number(self._cell(row, columns.volume), columns.volume, integer=True))
        entry_date = parse_date(self._cell(row, columns.date), columns.date)

        exit_price = None
        if raw := self._cell(row, columns.exit_price):
            exit_price = float(parse_number(raw, str(columns.exit_price)))
        exit_date = None
        if (raw := self._cell(row, columns.exit_date)) and looks_like_date(raw):
            exit_date = parse_date(raw, str(columns.exit_date))
        pnl = None
        if raw := self._cell(row, columns.profit):
            pnl = float(parse_number(raw, str(columns.profit)))
        tags = None
        if raw := self._cell(row, columns.tags):
            tags = tuple(tag.strip() for tag in raw.split(";") if tag.strip()) or None

        return Trade(
            id=trade_id,
            symbol=symbol,
            market=self.settings.market,
            market_category=self.settings.market_category,
            direction="Long" if action == "buy" else "Short",
            status="Closed" if exit_price is not None and exit_date is not None else "Open",
            entry_price=entry_price,
            quantity=quantity,
            entry_date=entry_date,
            exit_price=exit_price,
            exit_date=exit_date,
            pnl=pnl,
            tags=tags,
            notes=self._cell(row, columns.notes) or None,
        )
