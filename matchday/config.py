"""Engine configuration management."""

import logging
from functools import lru_cache
from pathlib import Path

from .schemas import EngineConfig
from .utils import load_json

logger = logging.getLogger('matchday.config')

DEFAULT_CONFIG_PATH = Path(__file__).parent / 'data' / 'engine_config.json'


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """
    Load engine configuration from matchday/data/engine_config.json.

    Configuration is cached after first load. When the file is absent the
    schema defaults are used.

    Returns:
        EngineConfig object with validated settings

    Raises:
        ValueError: If the config file has an invalid structure

    Example:
        from matchday.config import get_config
        config = get_config()
        print(f"Friendly default: {config.friendly_default_target}")
    """
    if not DEFAULT_CONFIG_PATH.exists():
        logger.debug(f'No config at {DEFAULT_CONFIG_PATH}, using defaults')
        return EngineConfig()
    return load_json(DEFAULT_CONFIG_PATH, schema=EngineConfig)


def load_config(path: Path | str) -> EngineConfig:
    """Load and validate a config file from an explicit path (not cached)."""
    return load_json(path, schema=EngineConfig)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
