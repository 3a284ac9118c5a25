"""Window host backends."""

from muxwm.workspace.host.base import WindowHost, WindowHostError

__all__ = ["WindowHost", "WindowHostError"]
