"""Locate the layered TOML files that configure Vitalis.

Reading and merging them is left to pydantic-settings; this module only
decides which files take part.
"""

import os
from pathlib import Path

CONFIG_DIR_ENV = "VITALIS_CONFIG_DIR"
ENVIRONMENT_ENV = "VITALIS_ENV"
DEFAULT_ENVIRONMENT = "development"


def get_config_dir() -> Path:
    """Return the directory holding default.toml.

    VITALIS_CONFIG_DIR wins when set and must exist. Otherwise the nearest
    `config/` directory at or above the working directory is used.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / "config"
        if (candidate / "default.toml").is_file():
            return candidate

    return cwd / "config"


def get_environment() -> str:
    """Return the deployment environment named by VITALIS_ENV."""
    return os.environ.get(ENVIRONMENT_ENV) or DEFAULT_ENVIRONMENT


def config_files() -> list[Path]:
    """TOML files to read, lowest precedence first.

    default.toml comes first and {VITALIS_ENV}.toml second. Either may be
    missing on disk.
    """
    config_dir = get_config_dir()
    return [config_dir / "default.toml", config_dir / f"{get_environment()}.toml"]
