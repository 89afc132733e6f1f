"""Core trade import data models and importer settings."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal

import pandas as pd
import yaml

Direction = Literal["Long", "Short"]
Status = Literal["Open", "Closed"]
TRADE_COLUMNS = [
    "id",
    "symbol",
    "market",
    "market_category",
    "type",
    "status",
    "entry_price",
    "exit_price",
    "quantity",
    "entry_date",
    "exit_date",
    "pnl",
    "tags",
    "notes",
]


@dataclass(frozen=True, slots=True)
class Trade:
    """Normalized trade built from one broker export row."""

    id: str
    symbol: str
    direction: Direction
    status: Status
    entry_price: float
    quantity: int
    entry_date: str
    market: str = "Other"
    market_category: str = "Other"
    exit_price: float | None = None
    exit_date: str | None = None
    pnl: float | None = None
    tags: tuple[str, ...] | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the trade to downstream storage column names."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "market": self.market,
            "market_category": self.market_category,
            "type": self.direction,
            "status": self.status,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "quantity": self.quantity,
            "entry_date": self.entry_date,
            "exit_date": self.exit_date,
            "pnl": self.pnl,
            "tags": list(self.tags) if self.tags is not None else None,
            "notes": self.notes,
        }

    def equals_ignoring_id(self, other: "Trade") -> bool:
        """Compare two trades field by field, skipping the generated identifier."""
        return all(
            getattr(self, field_info.name) == getattr(other, field_info.name)
            for field_info in fields(Trade)
            if field_info.name != "id"
        )


@dataclass(frozen=True, slots=True)
class TradeImportError:
    """One import failure; row 0 marks a file-level failure."""

    row: int
    message: str


@dataclass
class ImportResult:
    """Trades and errors collected from one import, in input row order."""

    trades: list[Trade] = field(default_factory=list)
    errors: list[TradeImportError] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def success(self) -> bool:
        """Return whether at least one trade was built and the file was readable."""
        return bool(self.trades) and not any(error.row == 0 for error in self.errors)

    @property
    def failed_rows(self) -> int:
        """Return number of data rows that could not be converted."""
        return sum(1 for error in self.errors if error.row > 0)

    def summary(self) -> str:
        """Build operator-facing summary of the import outcome."""
        if file_errors := [error.message for error in self.errors if error.row == 0]:
            return "\n".join(file_errors)
        lines = [
            f"Successfully imported {len(self.trades)} trades.",
            f"Skipped {self.skipped_rows} empty rows.",
        ]
        if self.failed_rows:
            lines.append(f"Failed to import {self.failed_rows} rows:")
            lines.extend(error.message for error in self.errors if error.row > 0)
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert imported trades to a table keyed by storage column names."""
        return pd.DataFrame([trade.to_dict() for trade in self.trades], columns=TRADE_COLUMNS)


@dataclass(frozen=True)
class ImporterSettings:
    """Defaults applied to every imported trade and to error display."""

    market: str = "Other"
    market_category: str = "Other"
    max_displayed_errors: int = 5

    _path_env_var_name = "TRADE_HISTORY_IMPORTER_CONFIG"

    @classmethod
    def config_path(cls) -> Path:
        """Return path to the YAML settings file."""
        if path := os.environ.get(cls._path_env_var_name):
            return Path(path).expanduser()
        return Path.home() / ".trade-history-importer" / "config.yaml"

    @classmethod
    def load(cls, path: Path | None = None) -> "ImporterSettings":
        """Read settings from YAML, falling back to defaults when the file is absent."""
        path = path or cls.config_path()
        if not path.is_file():
            return cls()
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping.")
        known = {field_info.name for field_info in fields(cls)}
        if unknown := sorted(set(data) - known):
            raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")
        return cls(**data)
