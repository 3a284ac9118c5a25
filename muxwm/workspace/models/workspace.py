"""Project, view and pin snapshots.

Immutable copies of rows, returned by the repository once the transaction
that read them has ended.  They never lazy-load: re-query the repository for
fresh state.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Project(BaseModel):
    """A named, ordered group of views with exactly one active view."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    active_view_id: int


class View(BaseModel):
    """One workspace slot of a project.  ``position`` orders the cycle."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    project_id: int
    position: int


class Pin(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    key: str
    view_id: int
