"""Runtime path helpers.

Centralizes where the bot looks for its configuration so local runs, tests and
installed copies resolve the same file without hardcoded machine paths.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from platformdirs import user_config_dir

APP_NAME = "ChadGPT"
DEFAULT_CONFIG_NAME = "config.yaml"


def _default_config_home() -> Path:
    return Path(user_config_dir(APP_NAME, appauthor=False))


def config_candidates(explicit: Optional[str | Path] = None) -> list[Path]:
    candidates: list[Path] = []
    if explicit:
        candidates.append(Path(explicit))
    from_env = (os.environ.get("CHADGPT_CONFIG") or "").strip()
    if from_env:
        candidates.append(Path(from_env))
    candidates.append(Path.cwd() / DEFAULT_CONFIG_NAME)
    candidates.append(_default_config_home() / DEFAULT_CONFIG_NAME)
    return [path.expanduser() for path in candidates]


def _first_existing(paths: Iterable[Path]) -> Optional[Path]:
    for path in paths:
        try:
            if path.is_file():
                return path.resolve()
        except OSError:
            continue
    return None


def resolve_config_path(explicit: Optional[str | Path] = None) -> Path:
    """Return the config file to load.

    An explicit path always wins, even when it does not exist, so the caller
    reports the path the user actually asked for.
    """
    if explicit:
        return Path(explicit).expanduser().resolve()
    found = _first_existing(config_candidates())
    if found is not None:
        return found
    return (Path.cwd() / DEFAULT_CONFIG_NAME).resolve()
