"""Shared enumerations."""

from __future__ import annotations

from enum import StrEnum


class Direction(StrEnum):
    """Which way to step through a project's views."""

    NEXT = "next"
    PREV = "prev"
