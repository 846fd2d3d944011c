from .loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, validate_thresholds

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "load_config",
    "validate_thresholds",
]
