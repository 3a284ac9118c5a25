"""Pin operations.

A pin binds a short key to one view.  Keys are unique; setting an existing
key retargets it (SQLite ``INSERT ... ON CONFLICT DO UPDATE``), so no
read-modify-write is needed.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from muxwm.workspace.db.tables import Pin, View
from muxwm.workspace.errors import PinNotFoundError
from muxwm.workspace.managers.views import get_view
from muxwm.workspace.models.display_name import validate_pin_key


def upsert_pin(db: Session, key: str, view_id: int) -> Pin:
    """Bind *key* to *view_id*, replacing any previous target of the key."""
    key = validate_pin_key(key)
    get_view(db, view_id)

    stmt = (
        sqlite_insert(Pin)
        .values(key=key, view_id=view_id)
        .on_conflict_do_update(index_elements=[Pin.key], set_={"view_id": view_id})
    )
    db.execute(stmt)
    return db.scalars(select(Pin).where(Pin.key == key)).one()


def delete_pin(db: Session, key: str) -> bool:
    """Remove the pin for *key*.  Returns False (not an error) if there was none."""
    result = db.execute(delete(Pin).where(Pin.key == key))
    return result.rowcount > 0


def get_view_for_key(db: Session, key: str) -> View:
    """Resolve a pin key to its view.

    Raises ``PinNotFoundError`` if no pin has the key, or if the pin is
    dangling (its view row is gone).
    """
    row = db.execute(select(Pin, View).outerjoin(View, Pin.view_id == View.id).where(Pin.key == key)).first()
    if row is None:
        raise PinNotFoundError(key)
    pin, view = row
    if view is None:
        raise PinNotFoundError(key, missing_view_id=pin.view_id)
    return view


def get_key_for_view(db: Session, view_id: int) -> str | None:
    """Return the oldest pin key pointing at *view_id*, or None if unpinned."""
    return db.scalar(select(Pin.key).where(Pin.view_id == view_id).order_by(Pin.id).limit(1))


def list_pins(db: Session) -> list[Pin]:
    result = db.scalars(select(Pin).order_by(Pin.key))
    return list(result.all())
