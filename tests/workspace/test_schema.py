"""Schema initialisation, connection pragmas and store-error translation."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from muxwm.workspace.db.engine import create_engine, database_url, init_schema
from muxwm.workspace.errors import (
    ConstraintViolationError,
    DuplicateNameError,
    StoreUnavailableError,
    WorkspaceError,
)
from muxwm.workspace.repository import WorkspaceRepository


def _table_names(path: Path) -> set[str]:
    with closing(sqlite3.connect(path)) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


def test_tables_created_on_open(repo: WorkspaceRepository, db_path: Path) -> None:
    assert {"projects", "views", "pins"} <= _table_names(db_path)


def test_reopen_keeps_existing_rows(db_path: Path) -> None:
    """Schema creation is create-if-absent: a second open must not wipe data."""
    with WorkspaceRepository.open(db_path) as first:
        first.add_project("admin")

    with WorkspaceRepository.open(db_path) as second:
        assert [p.name for p in second.list_projects()] == ["admin"]


def test_init_schema_is_idempotent(db_path: Path) -> None:
    engine = create_engine(db_path)
    try:
        init_schema(engine)
        init_schema(engine)
    finally:
        engine.dispose()
    assert {"projects", "views", "pins"} <= _table_names(db_path)


def test_open_creates_parent_directory(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "store.db"
    with WorkspaceRepository.open(path) as repository:
        repository.add_project("p")
    assert path.exists()


def test_in_memory_store_survives_between_calls() -> None:
    with WorkspaceRepository.open(":memory:") as repository:
        project_id = repository.add_project("scratch")
        assert repository.get_project(project_id).name == "scratch"


def test_database_url() -> None:
    assert database_url(":memory:") == "sqlite+pysqlite://"
    assert database_url("/tmp/x.db") == "sqlite+pysqlite:////tmp/x.db"


# ---------------------------------------------------------------------------
# Pragmas and deferred constraints
# ---------------------------------------------------------------------------


def test_connection_pragmas(tmp_path: Path) -> None:
    engine = create_engine(tmp_path / "p.db", busy_timeout=1.5)
    try:
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
            assert conn.exec_driver_sql("PRAGMA busy_timeout").scalar() == 1500
    finally:
        engine.dispose()


def test_dangling_active_view_rejected_at_commit(tmp_path: Path) -> None:
    """The deferred key tolerates the placeholder mid-transaction but not at COMMIT."""
    engine = create_engine(tmp_path / "fk.db")
    init_schema(engine)
    try:
        with pytest.raises(IntegrityError, match="FOREIGN KEY"), engine.begin() as conn:
            conn.exec_driver_sql("INSERT INTO projects (name, active_view_id) VALUES ('ghost', 42)")
        with engine.connect() as conn:
            assert conn.exec_driver_sql("SELECT COUNT(*) FROM projects").scalar() == 0
    finally:
        engine.dispose()


def test_project_and_view_insertable_in_either_order(tmp_path: Path) -> None:
    engine = create_engine(tmp_path / "order.db")
    init_schema(engine)
    try:
        with engine.begin() as conn:
            conn.exec_driver_sql("INSERT INTO views (id, name, project_id, position) VALUES (7, 'view', 3, 0)")
            conn.exec_driver_sql("INSERT INTO projects (id, name, active_view_id) VALUES (3, 'p', 7)")
        with engine.connect() as conn:
            assert conn.exec_driver_sql("SELECT active_view_id FROM projects WHERE id = 3").scalar() == 7
    finally:
        engine.dispose()


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------


def test_unique_name_violation_becomes_duplicate(repo: WorkspaceRepository) -> None:
    orig = sqlite3.IntegrityError("UNIQUE constraint failed: projects.name")
    with pytest.raises(DuplicateNameError), repo._translate_errors():
        raise IntegrityError("INSERT INTO projects ...", {}, orig)


def test_view_name_violation_becomes_duplicate(repo: WorkspaceRepository) -> None:
    orig = sqlite3.IntegrityError("UNIQUE constraint failed: views.project_id, views.name")
    with pytest.raises(DuplicateNameError), repo._translate_errors():
        raise IntegrityError("INSERT INTO views ...", {}, orig)


def test_other_integrity_errors_become_constraint_violations(repo: WorkspaceRepository) -> None:
    orig = sqlite3.IntegrityError("FOREIGN KEY constraint failed")
    with pytest.raises(ConstraintViolationError, match="FOREIGN KEY") as excinfo, repo._translate_errors():
        raise IntegrityError("COMMIT", {}, orig)
    assert isinstance(excinfo.value.__cause__, IntegrityError)


def test_operational_errors_become_store_unavailable(repo: WorkspaceRepository) -> None:
    orig = sqlite3.OperationalError("database is locked")
    with pytest.raises(StoreUnavailableError, match="locked"), repo._translate_errors():
        raise OperationalError("BEGIN IMMEDIATE", {}, orig)


def test_unopenable_store_is_unavailable(tmp_path: Path) -> None:
    directory = tmp_path / "not-a-file"
    directory.mkdir()
    with pytest.raises(StoreUnavailableError):
        WorkspaceRepository.open(directory)


def test_store_under_a_file_is_unavailable(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("")

    with pytest.raises(StoreUnavailableError, match="Cannot create store") as excinfo:
        WorkspaceRepository.open(blocker / "sub" / "muxwm.db")

    assert isinstance(excinfo.value.__cause__, OSError)
    assert not (blocker / "sub").exists()


# ---------------------------------------------------------------------------
# Locking between processes
# ---------------------------------------------------------------------------


@pytest.mark.integration
def test_locked_store_fails_fast(db_path: Path) -> None:
    """A writer holding the lock makes a second writer fail after busy_timeout."""
    repository = WorkspaceRepository.open(db_path, busy_timeout=0.1)
    blocker = sqlite3.connect(db_path, isolation_level=None)
    try:
        blocker.execute("BEGIN IMMEDIATE")
        with pytest.raises(StoreUnavailableError) as excinfo:
            repository.add_project("contended")
        assert isinstance(excinfo.value, WorkspaceError)
        assert isinstance(excinfo.value, RuntimeError)

        blocker.execute("ROLLBACK")
        repository.add_project("contended")
        assert [p.name for p in repository.list_projects()] == ["contended"]
    finally:
        blocker.close()
        repository.close()


@pytest.mark.integration
def test_two_repositories_share_one_store(db_path: Path) -> None:
    with WorkspaceRepository.open(db_path) as first, WorkspaceRepository.open(db_path) as second:
        project_id = first.add_project("shared")
        project = second.get_project(project_id)
        view = second.add_view_to_project(project, "b")
        assert first.get_active_view_for_project(project) == view
