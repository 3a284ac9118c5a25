"""i3 / sway window host over IPC.

Uses the synchronous ``i3ipc.Connection``; each CLI invocation makes a
handful of short requests, so no event loop or reconnection is involved.
"""

from __future__ import annotations

import i3ipc
from loguru import logger

from muxwm.workspace.host.base import WindowHostError


def _quote(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class I3WindowHost:
    """WindowHost implementation for i3 and sway.

    The IPC socket is opened on first use.  ``socket_path`` defaults to the
    one i3ipc discovers from ``I3SOCK`` / ``SWAYSOCK``.
    """

    def __init__(self, socket_path: str | None = None) -> None:
        self._socket_path = socket_path
        self._conn: i3ipc.Connection | None = None

    def _connection(self) -> i3ipc.Connection:
        if self._conn is None:
            try:
                self._conn = i3ipc.Connection(socket_path=self._socket_path)
            except Exception as exc:
                msg = f"Cannot connect to the window manager: {exc}"
                raise WindowHostError(msg) from exc
        return self._conn

    def focus(self, display_name: str) -> None:
        command = f"workspace {_quote(display_name)}"
        logger.debug("i3 command: {}", command)
        replies = self._connection().command(command)
        for reply in replies:
            if not reply.success:
                msg = f"Window manager rejected '{command}': {reply.error}"
                raise WindowHostError(msg)

    def active_workspace_name(self) -> str | None:
        for reply in self._connection().get_workspaces():
            if reply.focused:
                return reply.name
        return None

    def all_workspace_names(self) -> list[str]:
        return [reply.name for reply in self._connection().get_workspaces()]
