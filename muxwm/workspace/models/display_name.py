"""Display-name codec.

The window host knows workspaces only by name.  A managed workspace is named
``<project>#<view>``; this module is the one place that builds and splits
those strings, and the one place that decides which project and view names
are acceptable (``#`` is reserved, blank names are rejected).
"""

from __future__ import annotations

from dataclasses import dataclass

from muxwm.workspace.errors import InvalidNameError, MalformedDisplayNameError

SEPARATOR = "#"


def validate_name(name: str, *, kind: str = "name") -> str:
    """Return *name* stripped of surrounding whitespace.

    Raises ``InvalidNameError`` if it is blank or contains the separator.
    """
    cleaned = name.strip()
    if not cleaned:
        msg = f"{kind.capitalize()} must not be empty"
        raise InvalidNameError(msg)
    if SEPARATOR in cleaned:
        msg = f"{kind.capitalize()} '{cleaned}' must not contain '{SEPARATOR}'"
        raise InvalidNameError(msg)
    return cleaned


def validate_pin_key(key: str) -> str:
    """Pin keys are short tokens: non-empty, no whitespace anywhere."""
    if not key or any(ch.isspace() for ch in key):
        msg = f"Invalid pin key {key!r}: must be non-empty without whitespace"
        raise InvalidNameError(msg)
    return key


@dataclass(frozen=True)
class DisplayName:
    """A ``(project name, view name)`` pair as the window host sees it."""

    project: str
    view: str

    def __post_init__(self) -> None:
        for kind, value in (("project name", self.project), ("view name", self.view)):
            if validate_name(value, kind=kind) != value:
                msg = f"{kind.capitalize()} {value!r} has surrounding whitespace"
                raise InvalidNameError(msg)

    def __str__(self) -> str:
        return f"{self.project}{SEPARATOR}{self.view}"

    def format(self) -> str:
        return str(self)

    @staticmethod
    def split(raw: str) -> tuple[str, str]:
        """Split *raw* at its separator without judging either half.

        Raises ``MalformedDisplayNameError`` unless *raw* contains exactly one
        ``#``.  The halves are returned as-is, so ``"admin #view"`` yields
        ``("admin ", "view")``; whether they name anything is up to the caller.
        """
        if raw.count(SEPARATOR) != 1:
            raise MalformedDisplayNameError(raw)
        project, view = raw.split(SEPARATOR, 1)
        return project, view

    @classmethod
    def parse(cls, raw: str) -> DisplayName:
        """Build a ``DisplayName`` from *raw*.

        Stricter than ``split``: both halves must also be valid names, or
        ``MalformedDisplayNameError`` is raised.
        """
        project, view = cls.split(raw)
        try:
            return cls(project=project, view=view)
        except InvalidNameError:
            raise MalformedDisplayNameError(raw) from None
