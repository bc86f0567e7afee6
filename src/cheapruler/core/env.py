"""
Environment helpers.

`load_dotenv_if_present()` loads a `.env` file once, without overriding variables
already set in the process, so `CHEAPRULER_*` settings can live next to a project.
The file is `CHEAPRULER_ENV_FILE` when set, else `.env` in the working directory.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once if present; returns the loaded env path (or None)."""
    explicit = os.getenv("CHEAPRULER_ENV_FILE")
    env_path = Path(explicit).expanduser().resolve() if explicit else Path.cwd() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path
