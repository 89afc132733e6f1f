"""Import orchestration from raw broker export text to trades and row errors."""

import csv
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from uuid import uuid4

from trade_history_importer.columns import MissingColumnsError, resolve_columns
from trade_history_importer.config import ImporterSettings, ImportResult, TradeImportError
from trade_history_importer.rows import RowError, TradeRowBuilder

logger = logging.getLogger(__name__)

NO_TRADES_MESSAGE = "No valid trades found in the file"
SAMPLE_TEMPLATE = (
    "Open,Symbol,Open Price,Volume,Action,Close,Close Price,Win/Loss,Profit,Tags,Notes\n"
    "2024-03-18 10:30:00,AAPL,175.50,100,BUY,2024-03-18 14:45:00,178.25,Win,275,"
    "Tech;Momentum,Strong breakout pattern\n"
    "2024-03-14,TSLA,190.25,50,SELL,2024-03-14 15:30:00,187.50,Win,137.50,"
    "EV;Trend,Clear resistance break\n"
)

_IMPORT_EXCEPTIONS = (
    ArithmeticError,
    LookupError,
    TypeError,
    UnicodeError,
    ValueError,
    csv.Error,
)


def _new_trade_id() -> str:
    """Return random unique trade identifier."""
    return str(uuid4())


def _decode(content: str | bytes) -> str:
    """Return export text, decoding bytes as UTF-8 and dropping a leading BOM."""
    if isinstance(content, bytes):
        return content.decode("utf-8-sig")
    return content.removeprefix("\ufeff")


def _split_line(line: str) -> list[str]:
    """Split one physical line into cells, honoring quoted fields."""
    return next(csv.reader([line], skipinitialspace=True, strict=True), [])


def _tokenize(text: str) -> tuple[list[str], list[str], int]:
    """Split export text into header labels, raw data lines and skipped blank-line count."""
    lines: list[str] = []
    skipped_rows = 0
    for line in text.splitlines():
        if not line.strip():
            skipped_rows += 1
            continue
        lines.append(line)
    if not lines:
        return [], [], skipped_rows
    return [cell.strip() for cell in _split_line(lines[0])], lines[1:], skipped_rows


def _to_mapping(headers: Sequence[str], cells: Sequence[str]) -> dict[str, str]:
    """Align row cells to header labels, padding short rows and dropping extra cells."""
    return {
        header: cells[index].strip() if index < len(cells) else ""
        for index, header in enumerate(headers)
    }


def _import_trades(
    content: str | bytes,
    id_factory: Callable[[], str],
    settings: ImporterSettings,
) -> ImportResult:
    """Run column resolution once and row building per row, isolating row failures."""
    headers, lines, skipped_rows = _tokenize(_decode(content))
    result = ImportResult(skipped_rows=skipped_rows)
    records: list[dict[str, str] | RowError] = []
    for row_number, line in enumerate(lines, start=1):
        try:
            records.append(_to_mapping(headers, _split_line(line)))
        except csv.Error as error:
            records.append(RowError(row_number, str(error)))
    try:
        column_map = resolve_columns(
            headers, [record for record in records if isinstance(record, dict)]
        )
    except MissingColumnsError as error:
        result.errors.append(TradeImportError(0, str(error)))
        return result

    builder = TradeRowBuilder(column_map, settings)
    for row_number, record in enumerate(records, start=1):
        try:
            if isinstance(record, RowError):
                raise record
            result.trades.append(builder.build(record, row_number, id_factory()))
        except RowError as error:
            result.errors.append(TradeImportError(error.row, str(error)))
    if not result.trades and not result.errors:
        result.errors.append(TradeImportError(0, NO_TRADES_MESSAGE))
    logger.debug(
        "Imported %d trades with %d errors from %d data rows",
        len(result.trades),
        len(result.errors),
        len(records),
    )
    return result


def import_trades(
    content: str | bytes,
    id_factory: Callable[[], str] | None = None,
    settings: ImporterSettings | None = None,
) -> ImportResult:
    """Convert one broker export into trades and per-row errors.

    Row-level problems never raise; they are returned as errors numbered by
    data row. Unexpected failures while reading the text are reported as a
    single row-0 error.
    """
    try:
        return _import_trades(content, id_factory or _new_trade_id, settings or ImporterSettings())
    except _IMPORT_EXCEPTIONS as error:
        logger.debug("Import failed before row processing", exc_info=error)
        return ImportResult(errors=[TradeImportError(0, str(error) or "Failed to import file")])


def import_trades_from_file(
    path: Path | str,
    id_factory: Callable[[], str] | None = None,
    settings: ImporterSettings | None = None,
) -> ImportResult:
    """Read one export file and import its trades."""
    path = Path(path).expanduser()
    try:
        content = path.read_bytes()
    except OSError as error:
        return ImportResult(
            errors=[TradeImportError(0, f"Failed to read {path.name}: {error.strerror or error}")]
        )
    return import_trades(content, id_factory=id_factory, settings=settings)
