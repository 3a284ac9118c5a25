"""View operations: appending, lookups and cyclic next/prev navigation."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from muxwm.workspace.db.tables import View
from muxwm.workspace.errors import DuplicateNameError, NoViewsInProjectError, ViewNotFoundError
from muxwm.workspace.managers.projects import get_active_view, get_project, set_active_view
from muxwm.workspace.models.display_name import validate_name
from muxwm.workspace.models.enums import Direction


def append_view(db: Session, project_id: int, name: str) -> View:
    """Append a view after the project's last position and make it active.

    The caller's transaction must hold the write lock (``BEGIN IMMEDIATE``)
    so reading ``max(position)`` and inserting cannot race another append.

    Raises ``ProjectNotFoundError``, ``InvalidNameError`` or
    ``DuplicateNameError`` (view name already used in this project).
    """
    project = get_project(db, project_id)
    name = validate_name(name, kind="view name")

    existing = db.scalar(select(View.id).where(View.project_id == project.id, View.name == name))
    if existing is not None:
        msg = f"View '{name}' already exists in project '{project.name}'"
        raise DuplicateNameError(msg)

    last = db.scalar(select(func.max(View.position)).where(View.project_id == project.id))
    position = 0 if last is None else last + 1

    view = View(name=name, project_id=project.id, position=position)
    db.add(view)
    db.flush()

    return set_active_view(db, project.id, view.id)


def list_views(db: Session, project_id: int) -> list[View]:
    """List a project's views in cycle order.  Raises ``ProjectNotFoundError``."""
    get_project(db, project_id)
    result = db.scalars(select(View).where(View.project_id == project_id).order_by(View.position))
    return list(result.all())


def get_view(db: Session, view_id: int) -> View:
    view = db.get(View, view_id)
    if view is None:
        raise ViewNotFoundError(view_id)
    return view


def get_view_by_name(db: Session, project_id: int, name: str) -> View:
    """Get a view by its name within a project.  Raises ``ViewNotFoundError``."""
    view = db.scalar(select(View).where(View.project_id == project_id, View.name == name))
    if view is None:
        raise ViewNotFoundError(name, project_id)
    return view


def step_view(db: Session, project_id: int, direction: Direction) -> View:
    """Return the view after (or before) the active one, wrapping around.

    Read-only: the caller commits the result with ``set_active_view``.

    Raises ``NoActiveViewError`` if the active pointer is broken and
    ``NoViewsInProjectError`` if the project has no views at all.
    """
    current = get_active_view(db, project_id)

    stmt = select(View).where(View.project_id == project_id)
    if direction is Direction.NEXT:
        neighbour = stmt.where(View.position > current.position).order_by(View.position.asc())
        wrapped = stmt.order_by(View.position.asc())
    else:
        neighbour = stmt.where(View.position < current.position).order_by(View.position.desc())
        wrapped = stmt.order_by(View.position.desc())

    view = db.scalar(neighbour.limit(1))
    if view is None:
        view = db.scalar(wrapped.limit(1))
    if view is None:
        raise NoViewsInProjectError(project_id)
    return view
