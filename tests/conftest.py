"""Shared pytest fixtures for settings isolation and network blocking."""

import socket
import urllib.request
from pathlib import Path

import pytest

from trade_history_importer.columns import ColumnMap


@pytest.fixture(autouse=True)
def isolate_settings_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Force settings reads into per-test temporary directory."""
    monkeypatch.setenv("TRADE_HISTORY_IMPORTER_CONFIG", str(tmp_path / "config.yaml"))


@pytest.fixture(autouse=True)
def block_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Block network access in all tests."""

    def blocked(*_args: object, **_kwargs: object) -> None:
        """Raise explicit error when any test attempts network access."""
        raise AssertionError("Network access is blocked in tests.")

    monkeypatch.setattr(urllib.request, "urlopen", blocked)
    monkeypatch.setattr(socket, "create_connection", blocked)
    monkeypatch.setattr(socket.socket, "connect", blocked)
    monkeypatch.setattr(socket.socket, "connect_ex", blocked)


def build_column_map(**optional: str) -> ColumnMap:
    """Build column map for the standard `Open,Symbol,Open Price,Volume,Action` headers."""
    return ColumnMap(
        date="Open",
        symbol="Symbol",
        price="Open Price",
        volume="Volume",
        action="Action",
        **optional,
    )
