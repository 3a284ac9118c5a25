"""Project operations.

Covers project creation (with its default view), lookups, listing and the
active-view pointer.  ``set_active_view`` is the only code that writes
``projects.active_view_id`` after creation.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from muxwm.workspace.db.tables import Project, View
from muxwm.workspace.errors import (
    DuplicateNameError,
    NoActiveViewError,
    ProjectNotFoundError,
    ViewNotFoundError,
    ViewNotInProjectError,
)
from muxwm.workspace.models.display_name import validate_name

# Stand-in for projects.active_view_id until the default view row exists.
# Row ids start at 1, so a project left pointing here fails the deferred
# foreign key at COMMIT.
_PENDING_VIEW_ID = 0


def create_project(db: Session, name: str, *, default_view_name: str) -> Project:
    """Create a project together with its first view at position 0.

    The project row is inserted with a placeholder active view, the view is
    inserted, then the project is patched to point at it.  All three writes
    share the caller's transaction; the deferred foreign keys are checked
    when it commits.

    Raises ``DuplicateNameError`` if the name is taken and
    ``InvalidNameError`` if either name is unacceptable.
    """
    name = validate_name(name, kind="project name")
    view_name = validate_name(default_view_name, kind="view name")

    existing = db.scalar(select(Project.id).where(Project.name == name))
    if existing is not None:
        msg = f"Project '{name}' already exists"
        raise DuplicateNameError(msg)

    project = Project(name=name, active_view_id=_PENDING_VIEW_ID)
    db.add(project)
    db.flush()

    view = View(name=view_name, project_id=project.id, position=0)
    db.add(view)
    db.flush()

    project.active_view_id = view.id
    db.flush()
    return project


def get_project(db: Session, project_id: int) -> Project:
    """Get a project by ID.  Raises ``ProjectNotFoundError`` if missing."""
    project = db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


def get_project_by_name(db: Session, name: str) -> Project:
    """Get a project by name.  Raises ``ProjectNotFoundError`` if missing."""
    project = db.scalar(select(Project).where(Project.name == name))
    if project is None:
        raise ProjectNotFoundError(name)
    return project


def list_projects(db: Session) -> list[Project]:
    """List all projects in creation order."""
    result = db.scalars(select(Project).order_by(Project.id))
    return list(result.all())


def get_active_view(db: Session, project_id: int) -> View:
    """Resolve the project's active view pointer.

    Raises ``ProjectNotFoundError`` if the project is gone and
    ``NoActiveViewError`` if the pointer does not resolve to one of its views.
    """
    project = get_project(db, project_id)
    view = db.get(View, project.active_view_id)
    if view is None or view.project_id != project.id:
        raise NoActiveViewError(project.name)
    return view


def set_active_view(db: Session, project_id: int, view_id: int) -> View:
    """Point the project at *view_id*.

    Nothing is written unless the view exists and belongs to the project:
    ``ViewNotFoundError`` / ``ViewNotInProjectError`` otherwise.
    """
    project = get_project(db, project_id)
    view = db.get(View, view_id)
    if view is None:
        raise ViewNotFoundError(view_id)
    if view.project_id != project.id:
        raise ViewNotInProjectError(view.id, project.id)

    project.active_view_id = view.id
    db.flush()
    return view
