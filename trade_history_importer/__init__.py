"""Normalization of broker trade history exports into validated trades."""

from trade_history_importer.columns import ColumnMap, MissingColumnsError, resolve_columns
from trade_history_importer.config import ImporterSettings, ImportResult, Trade, TradeImportError
from trade_history_importer.importer import (
    SAMPLE_TEMPLATE,
    import_trades,
    import_trades_from_file,
)
from trade_history_importer.normalizers import classify_action, parse_date, parse_number
from trade_history_importer.rows import RowError, TradeRowBuilder

__all__ = [
    "ColumnMap",
    "ImportResult",
    "ImporterSettings",
    "MissingColumnsError",
    "RowError",
    "SAMPLE_TEMPLATE",
    "Trade",
    "TradeImportError",
    "TradeRowBuilder",
    "classify_action",
    "import_trades",
    "import_trades_from_file",
    "parse_date",
    "parse_number",
    "resolve_columns",
]
