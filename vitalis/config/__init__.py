"""Configuration loading for Vitalis.

Usage:
    from vitalis.config import get_settings

    settings = get_settings()
    fmt = settings.observations.date_format
"""

from functools import lru_cache

from vitalis.config.loader import config_files
from vitalis.config.settings import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use.

    Raises:
        FileNotFoundError: If the config directory has no default.toml
    """
    default_file = config_files()[0]
    if not default_file.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_file}. "
            "Create config/default.toml or set VITALIS_CONFIG_DIR."
        )
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
