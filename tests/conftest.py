"""Shared test fixtures: a SQLite-backed repository and a fake window host.

Each test gets its own database file under ``tmp_path`` and a settings
environment stripped of any real ``MUXWM_*`` variables, so nothing on the
developer's machine (database, .env, i3 socket) is touched.
"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import closing
from pathlib import Path

import pytest
from loguru import logger

from muxwm.workspace.repository import WorkspaceRepository
from muxwm.workspace.settings import get_settings

TABLES = ("projects", "views", "pins")


class FakeWindowHost:
    """In-memory WindowHost that records focus requests."""

    def __init__(self, workspaces: list[str] | None = None, focused: str | None = None) -> None:
        self.workspaces = list(workspaces or [])
        self.focused = focused
        self.focus_calls: list[str] = []

    def focus(self, display_name: str) -> None:
        self.focus_calls.append(display_name)
        if display_name not in self.workspaces:
            self.workspaces.append(display_name)
        self.focused = display_name

    def active_workspace_name(self) -> str | None:
        return self.focused

    def all_workspace_names(self) -> list[str]:
        return list(self.workspaces)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop MUXWM_* variables, point XDG at tmp_path and avoid stray .env files."""
    for key in list(os.environ):
        if key.startswith("MUXWM_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    # CLI tests install a loguru sink on CliRunner's temporary stderr.
    logger.remove()


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "muxwm.db"


@pytest.fixture
def repo(db_path: Path) -> Iterator[WorkspaceRepository]:
    with WorkspaceRepository.open(db_path) as repository:
        yield repository


@pytest.fixture
def row_counts(db_path: Path) -> Callable[[], dict[str, int]]:
    """Count rows per table through an independent connection."""

    def _count() -> dict[str, int]:
        with closing(sqlite3.connect(db_path)) as conn:
            return {table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] for table in TABLES}

    return _count


@pytest.fixture
def raw_sql(db_path: Path) -> Callable[[str, tuple], None]:
    """Run a statement on a plain sqlite3 connection (foreign keys OFF).

    Used to fabricate corrupt states the repository itself never produces.
    """

    def _run(sql: str, params: tuple = ()) -> None:
        with closing(sqlite3.connect(db_path)) as conn:
            conn.execute(sql, params)
            conn.commit()

    return _run


# ---------------------------------------------------------------------------
# Window host
# ---------------------------------------------------------------------------


@pytest.fixture
def host() -> FakeWindowHost:
    return FakeWindowHost()
