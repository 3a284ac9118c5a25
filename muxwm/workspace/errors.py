"""Domain exceptions raised by the workspace repository and its managers.

Every failure is a ``WorkspaceError``.  The second base class places each one
in the standard hierarchy (``LookupError`` for misses, ``ValueError`` for bad
input or broken constraints, ``RuntimeError`` for an unusable store) so callers
that do not know about muxwm can still catch them sensibly.  Translating them
into user-facing messages is the CLI's responsibility.
"""

from __future__ import annotations


class WorkspaceError(Exception):
    """Base class for all muxwm domain errors."""


# ---------------------------------------------------------------------------
# Lookup misses
# ---------------------------------------------------------------------------


class NotFoundError(WorkspaceError, LookupError):
    """A project, view or pin lookup found nothing."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project: int | str) -> None:
        super().__init__(f"Project '{project}' not found")


class ViewNotFoundError(NotFoundError):
    def __init__(self, view: int | str, project: int | str | None = None) -> None:
        if project is not None:
            super().__init__(f"View '{view}' not found in project '{project}'")
        else:
            super().__init__(f"View '{view}' not found")


class PinNotFoundError(NotFoundError):
    def __init__(self, key: str, missing_view_id: int | None = None) -> None:
        if missing_view_id is not None:
            super().__init__(f"Pin '{key}' points at missing view {missing_view_id}")
        else:
            super().__init__(f"No pin with key '{key}'")


class NoActiveViewError(NotFoundError):
    """The project's active view pointer does not resolve to a view row."""

    def __init__(self, project: int | str) -> None:
        super().__init__(f"Project '{project}' has no active view")


class NoViewsInProjectError(NotFoundError):
    def __init__(self, project: int | str) -> None:
        super().__init__(f"Project '{project}' has no views")


class NotManagedError(NotFoundError):
    """A host workspace name does not map to a managed (project, view) pair."""

    def __init__(self, display_name: str | None) -> None:
        if display_name is None:
            super().__init__("The window host reports no focused workspace")
        else:
            super().__init__(f"Workspace '{display_name}' is not managed by muxwm")


# ---------------------------------------------------------------------------
# Constraint and input errors
# ---------------------------------------------------------------------------


class DuplicateNameError(WorkspaceError, ValueError):
    """A unique name (project name, view name within a project) is taken."""


class ConstraintViolationError(WorkspaceError, ValueError):
    """A store integrity rule or a repository invariant would be broken."""


class ViewNotInProjectError(ConstraintViolationError):
    def __init__(self, view_id: int, project_id: int) -> None:
        super().__init__(f"View {view_id} does not belong to project {project_id}")


class MalformedInputError(WorkspaceError, ValueError):
    """User-supplied text cannot be accepted as given."""


class InvalidNameError(MalformedInputError):
    """A project name, view name or pin key fails validation."""


class MalformedDisplayNameError(MalformedInputError):
    def __init__(self, display_name: str) -> None:
        super().__init__(f"Malformed display name '{display_name}': expected '<project>#<view>'")


# ---------------------------------------------------------------------------
# Store failures
# ---------------------------------------------------------------------------


class StoreUnavailableError(WorkspaceError, RuntimeError):
    """The store could not be opened or a lock was not acquired in time."""
