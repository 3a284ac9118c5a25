"""Window host interface.

The window host is the external window manager that owns the real, flat set
of workspaces.  muxwm only ever exchanges workspace names with it; the names
are opaque strings here and are interpreted solely by ``DisplayName``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class WindowHostError(RuntimeError):
    """The window host rejected a command or could not be reached."""


@runtime_checkable
class WindowHost(Protocol):
    """Protocol for querying and focusing window-manager workspaces."""

    def focus(self, display_name: str) -> None:
        """Switch to the named workspace, creating it if the host requires."""
        ...

    def active_workspace_name(self) -> str | None:
        """Name of the focused workspace, or None if the host reports none."""
        ...

    def all_workspace_names(self) -> list[str]:
        """Every workspace the host currently knows about, in host order."""
        ...
