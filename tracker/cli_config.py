"""Configuration loading helpers for CLI entrypoints."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "ctt-status"
CONFIG_ENV_FILE = CONFIG_DIR / ".env"
EXAMPLE_ENV_FILE = Path(__file__).parent.parent / ".env.example"


def load_config(
    *,
    cwd: Path,
    load_env: Callable[[Path], bool],
    copy_file: Callable[[Path, Path], object],
    config_dir: Path = CONFIG_DIR,
    config_env_file: Path = CONFIG_ENV_FILE,
    example_file: Path = EXAMPLE_ENV_FILE,
) -> Optional[Path]:
    """Load the first .env file found and return its path.

    Search order:
    1. .env in the current working directory
    2. ~/.config/ctt-status/.env

    On first run neither exists; the project's .env.example is then copied
    to the user config directory and loaded. Returns None when nothing
    could be loaded.
    """
    for env_file in (cwd / ".env", config_env_file):
        if env_file.is_file():
            load_env(env_file)
            return env_file

    if not example_file.is_file():
        return None

    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        copy_file(example_file, config_env_file)
    except OSError as exc:
        LOGGER.debug("Could not create %s: %s", config_env_file, exc)
        return None

    LOGGER.info(
        "Created %s from %s; edit it to change the defaults.",
        config_env_file,
        example_file.name,
    )
    load_env(config_env_file)
    return config_env_file
