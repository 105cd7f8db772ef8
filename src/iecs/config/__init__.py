"""Configuration loading, merging, and validation."""

from iecs.config.defaults import (
    deep_merge,
    get_default_config,
    load_config,
    load_dotenv_config,
    load_env_config,
    load_global_config,
    load_yaml_config,
    merge_config,
)
from iecs.config.validation import validate_config

__all__ = [
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_dotenv_config",
    "load_env_config",
    "load_global_config",
    "load_yaml_config",
    "merge_config",
    "validate_config",
]
