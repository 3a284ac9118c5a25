"""Workspace repository: the one owner of the projects/views/pins store.

Every public method runs in its own short ``BEGIN IMMEDIATE`` transaction on
a fresh ``Session`` and returns frozen snapshots (``Project``, ``View``,
``Pin``), so nothing the caller holds can lazy-load or keep a lock open.
Multi-statement mutations (project creation, view append) are therefore
all-or-nothing.

Store errors are translated here and nowhere else:

- ``IntegrityError`` on a unique name -> ``DuplicateNameError``
- any other ``IntegrityError`` -> ``ConstraintViolationError``
- ``OperationalError`` (lock timeout, unopenable file) -> ``StoreUnavailableError``

The repository never talks to the window host.  Display names go in and out
as opaque strings; bridging the two is ``Navigator``'s job.

Not thread-safe: each CLI invocation owns its own instance.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from muxwm.workspace.db.engine import create_engine, create_session_factory, init_schema
from muxwm.workspace.errors import (
    ConstraintViolationError,
    DuplicateNameError,
    ProjectNotFoundError,
    StoreUnavailableError,
    ViewNotFoundError,
)
from muxwm.workspace.managers import pins as pin_ops
from muxwm.workspace.managers import projects as project_ops
from muxwm.workspace.managers import views as view_ops
from muxwm.workspace.models import Direction, DisplayName, Pin, Project, View

if TYPE_CHECKING:
    from muxwm.workspace.settings import MuxSettings

# Unique constraints that mean "that name is taken".
_NAME_COLUMNS = ("projects.name", "views.name")


class WorkspaceRepository:
    """Projects, their ordered views, and pins, persisted in SQLite."""

    def __init__(self, engine: Engine, *, default_view_name: str = "view") -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._default_view_name = default_view_name
        with self._translate_errors():
            init_schema(engine)

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        busy_timeout: float = 2.0,
        default_view_name: str = "view",
    ) -> WorkspaceRepository:
        """Open (creating if needed) the store at *path*.

        Raises ``StoreUnavailableError`` if the store's directory cannot be
        created or the file cannot be opened.
        """
        try:
            engine = create_engine(path, busy_timeout=busy_timeout)
        except OSError as exc:
            logger.warning("Store unavailable: {}", exc)
            msg = f"Cannot create store at {path}: {exc}"
            raise StoreUnavailableError(msg) from exc
        return cls(engine, default_view_name=default_view_name)

    @classmethod
    def from_settings(cls, settings: MuxSettings) -> WorkspaceRepository:
        return cls.open(
            settings.database_path,
            busy_timeout=settings.busy_timeout,
            default_view_name=settings.default_view_name,
        )

    def close(self) -> None:
        self._engine.dispose()

    def __enter__(self) -> WorkspaceRepository:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Transactions ----------------------------------------------------------

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            detail = str(exc.orig)
            if detail.startswith("UNIQUE constraint failed") and detail.endswith(_NAME_COLUMNS):
                raise DuplicateNameError(detail) from exc
            raise ConstraintViolationError(detail) from exc
        except OperationalError as exc:
            logger.warning("Store unavailable: {}", exc.orig)
            raise StoreUnavailableError(str(exc.orig)) from exc

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """Yield a session inside one transaction; commit on success, roll back on error."""
        with self._translate_errors(), self._session_factory.begin() as db:
            yield db

    # -- Projects --------------------------------------------------------------

    def add_project(self, name: str) -> int:
        """Create a project and its default view, which becomes active.

        Returns the new project's id.  Raises ``DuplicateNameError`` if the
        name exists; on any failure no row is left behind.
        """
        with self._transaction() as db:
            project = project_ops.create_project(db, name, default_view_name=self._default_view_name)
            project_id = project.id
        logger.info("Project created: {} (id={})", project.name, project_id)
        return project_id

    def get_project(self, project_id: int) -> Project:
        with self._transaction() as db:
            return Project.model_validate(project_ops.get_project(db, project_id))

    def get_project_by_name(self, name: str) -> Project:
        with self._transaction() as db:
            return Project.model_validate(project_ops.get_project_by_name(db, name))

    def list_projects(self) -> list[Project]:
        """All projects, oldest first.  A snapshot: call again to refresh."""
        with self._transaction() as db:
            return [Project.model_validate(row) for row in project_ops.list_projects(db)]

    # -- Views -----------------------------------------------------------------

    def add_view_to_project(self, project: Project, name: str) -> View:
        """Append a view at the end of the project's cycle and make it active."""
        with self._transaction() as db:
            view = View.model_validate(view_ops.append_view(db, project.id, name))
        logger.info("View added: {} (project={}, position={})", view.name, project.name, view.position)
        return view

    def list_views(self, project: Project) -> list[View]:
        with self._transaction() as db:
            return [View.model_validate(row) for row in view_ops.list_views(db, project.id)]

    def get_view(self, project: Project, name: str) -> View:
        with self._transaction() as db:
            return View.model_validate(view_ops.get_view_by_name(db, project.id, name))

    def get_active_view_for_project(self, project: Project) -> View:
        """The project's current active view, read from the store (not from *project*)."""
        with self._transaction() as db:
            return View.model_validate(project_ops.get_active_view(db, project.id))

    def set_active_view_for_project(self, project: Project, view: View) -> View:
        """Make *view* the project's active view.

        Raises ``ViewNotInProjectError`` (and writes nothing) when the view
        belongs to another project.
        """
        with self._transaction() as db:
            active = View.model_validate(project_ops.set_active_view(db, project.id, view.id))
        logger.info("Active view: {} -> {}", project.name, active.name)
        return active

    def get_next_view_for_project(self, project: Project) -> View:
        return self.step_view_for_project(project, Direction.NEXT)

    def get_prev_view_for_project(self, project: Project) -> View:
        return self.step_view_for_project(project, Direction.PREV)

    def step_view_for_project(self, project: Project, direction: Direction) -> View:
        """Neighbour of the active view in *direction*, wrapping at either end.

        Read-only; commit the result with ``set_active_view_for_project``.
        """
        with self._transaction() as db:
            view = View.model_validate(view_ops.step_view(db, project.id, direction))
        logger.debug("{} view of {}: {} (position={})", direction, project.name, view.name, view.position)
        return view

    # -- Pins ------------------------------------------------------------------

    def set_pin(self, key: str, view: View) -> Pin:
        """Bind *key* to *view*; an existing binding for *key* is replaced."""
        with self._transaction() as db:
            pin = Pin.model_validate(pin_ops.upsert_pin(db, key, view.id))
        logger.info("Pin set: {} -> view {}", pin.key, view.id)
        return pin

    def clear_pin(self, key: str) -> None:
        """Remove the pin for *key*.  Clearing an unknown key is a no-op."""
        with self._transaction() as db:
            removed = pin_ops.delete_pin(db, key)
        if removed:
            logger.info("Pin cleared: {}", key)

    def get_view_for_pin_key(self, key: str) -> View:
        """Raises ``PinNotFoundError`` if no pin has *key*."""
        with self._transaction() as db:
            return View.model_validate(pin_ops.get_view_for_key(db, key))

    def get_pin_key_for_view(self, view: View) -> str | None:
        """First pin key pointing at *view*, or None if the view is unpinned."""
        with self._transaction() as db:
            return pin_ops.get_key_for_view(db, view.id)

    def list_pins(self) -> list[Pin]:
        with self._transaction() as db:
            return [Pin.model_validate(row) for row in pin_ops.list_pins(db)]

    # -- Display names ---------------------------------------------------------

    def get_window_manager_display_name(self, view: View) -> str:
        """Encode *view* as the ``<project>#<view>`` workspace name."""
        with self._transaction() as db:
            project = project_ops.get_project(db, view.project_id)
            return DisplayName(project=project.name, view=view.name).format()

    def resolve_display_name(self, display_name: str) -> tuple[Project, View]:
        """Decode a workspace name back to its project and view.

        Raises ``MalformedDisplayNameError`` unless the name has exactly one
        ``#``, and ``ViewNotFoundError`` when either half names nothing in the
        store (including halves no project or view could be called, such as
        ``"admin #view"``).
        """
        project_name, view_name = DisplayName.split(display_name)
        with self._transaction() as db:
            try:
                project = project_ops.get_project_by_name(db, project_name)
            except ProjectNotFoundError:
                raise ViewNotFoundError(view_name, project_name) from None
            view = view_ops.get_view_by_name(db, project.id, view_name)
            return Project.model_validate(project), View.model_validate(view)
