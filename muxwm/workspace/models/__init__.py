"""Data models for the workspace layer."""

from muxwm.workspace.models.display_name import (
    SEPARATOR,
    DisplayName,
    validate_name,
    validate_pin_key,
)
from muxwm.workspace.models.enums import Direction
from muxwm.workspace.models.workspace import Pin, Project, View

__all__ = [
    "SEPARATOR",
    "Direction",
    "DisplayName",
    "Pin",
    "Project",
    "View",
    "validate_name",
    "validate_pin_key",
]
