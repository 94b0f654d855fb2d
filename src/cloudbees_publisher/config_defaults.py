"""Helpers for loading config defaults from .env/.env.defaults.

Lookup order for every setting is: environment variable, then `.env`, then
`.env.defaults`, then the fallback passed by the caller.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict


@lru_cache(maxsize=1)
def load_defaults() -> Dict[str, str]:
    """Load key/value defaults from `.env.defaults`, then overlay `.env`.

    - `.env.defaults` is the catalog + default values (version-controlled)
    - `.env` is a local override layer (not required to contain every key)

    Returns empty dict if neither file exists (e.g., on a build agent where
    all config is supplied via environment variables).
    """
    dirs: list[Path] = []
    repo_root = Path(__file__).resolve().parent.parent.parent
    dirs.append(repo_root)

    # Path.cwd() raises if the working directory was deleted under us.
    try:
        cwd = Path.cwd()
        if cwd.resolve() != repo_root.resolve():
            dirs.append(cwd)
    except (OSError, FileNotFoundError):
        pass

    merged: Dict[str, str] = {}

    for directory in dirs:
        defaults_path = directory / ".env.defaults"
        if defaults_path.exists():
            merged.update(_parse_env_file(defaults_path))

    for directory in dirs:
        env_path = directory / ".env"
        if env_path.exists():
            merged.update(_parse_env_file(env_path))

    return merged


def get_default(key: str, fallback: str | None = None) -> str | None:
    """Return the configured default for a key (or fallback)."""
    return load_defaults().get(key, fallback)


def get_setting(key: str, fallback: str | None = None) -> str | None:
    """Return the environment value for a key, falling back to the defaults files."""
    value = os.environ.get(key)
    if value is not None and value != "":
        return value
    return get_default(key, fallback)


def get_bool_setting(key: str, fallback: bool = False) -> bool:
    value = get_setting(key)
    if value is None:
        return fallback
    return value.strip().lower() in ("true", "1", "yes")


def get_int_setting(key: str, fallback: int) -> int:
    value = get_setting(key)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"Setting '{key}' must be an integer, got {value!r}")


def _parse_env_file(env_path: Path) -> Dict[str, str]:
    defaults: Dict[str, str] = {}
    with env_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            value = value.strip()
            # Strip surrounding quotes (single or double)
            if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                value = value[1:-1]
            defaults[key.strip()] = value
    return defaults
