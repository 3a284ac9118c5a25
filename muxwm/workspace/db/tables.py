"""SQLAlchemy ORM models for the SQLite store.

These are the single source of truth for the database schema; the tables are
created with ``Base.metadata.create_all`` (create-if-absent, never altered).

Projects and views reference each other: a view belongs to a project and a
project points at its active view.  Both foreign keys are
``DEFERRABLE INITIALLY DEFERRED`` so the two rows can be written in either
order inside one transaction and are only checked at COMMIT.

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


# Apply naming convention to the metadata for deterministic constraint names.
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(unique=True)
    # use_alter breaks the projects <-> views cycle for table ordering; SQLite
    # has no ALTER ADD CONSTRAINT so the key is still rendered inline.
    active_view_id: Mapped[int] = mapped_column(
        ForeignKey(
            "views.id",
            name="fk_projects_active_view_id",
            deferrable=True,
            initially="DEFERRED",
            use_alter=True,
        ),
    )


class View(Base):
    __tablename__ = "views"
    __table_args__ = (
        UniqueConstraint("project_id", "position", name="uq_views_project_id_position"),
        UniqueConstraint("project_id", "name", name="uq_views_project_id_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", name="fk_views_project_id", deferrable=True, initially="DEFERRED"),
    )
    position: Mapped[int]


class Pin(Base):
    __tablename__ = "pins"
    __table_args__ = (Index("ix_pins_view_id", "view_id"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(unique=True)
    view_id: Mapped[int] = mapped_column(ForeignKey("views.id", name="fk_pins_view_id"))
