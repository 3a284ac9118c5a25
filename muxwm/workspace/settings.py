"""Configuration loaded from MUXWM_* environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DATABASE = ":memory:"


def _default_database_path() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "muxwm" / "muxwm.db"


class MuxSettings(BaseSettings):
    """muxwm settings.

    All fields are read from environment variables with the ``MUXWM_`` prefix.
    For example, ``MUXWM_BUSY_TIMEOUT=5`` maps to ``busy_timeout``.  The CLI's
    ``--config`` option points ``_env_file`` at an alternative env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MUXWM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "WARNING"

    # -- Store -----------------------------------------------------------------
    database_path: Path = Field(default_factory=_default_database_path)
    """SQLite file holding projects, views and pins.  ``:memory:`` is accepted."""

    busy_timeout: float = 2.0
    """Seconds to wait on a locked store before failing with StoreUnavailableError.

    Two CLI invocations racing on the same file serialize on SQLite's write
    lock; the loser waits at most this long.
    """

    # -- Naming ----------------------------------------------------------------
    default_view_name: str = "view"
    """Label of the view created together with every new project."""

    @field_validator("busy_timeout")
    @classmethod
    def _non_negative_timeout(cls, value: float) -> float:
        if value < 0:
            msg = "busy_timeout must be >= 0"
            raise ValueError(msg)
        return value

    # -- Helpers ---------------------------------------------------------------

    @property
    def in_memory(self) -> bool:
        return str(self.database_path) == MEMORY_DATABASE


@lru_cache(maxsize=1)
def get_settings() -> MuxSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return MuxSettings()
