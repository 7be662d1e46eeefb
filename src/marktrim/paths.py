"""Common path utilities for marktrim."""

from __future__ import annotations

import os
from pathlib import Path


def get_marktrim_home() -> Path:
    """Return the base marktrim directory, honoring MARKTRIM_HOME if set."""

    env_path = os.environ.get("MARKTRIM_HOME")
    return Path(env_path).expanduser() if env_path else Path.home() / ".marktrim"


__all__ = ["get_marktrim_home"]
