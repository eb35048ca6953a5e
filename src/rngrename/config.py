"""Configuration management for rngrename.

This module handles loading configuration from environment variables and
config files, with sensible defaults for every value. Command-line options
are applied on top by the CLI.
"""

import logging
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Optional

from rngrename.char_set import Casing, CharSetSelection
from rngrename.file_ops import ConfirmMode
from rngrename.finalise import ExtensionModeSelection
from rngrename.name_generator import (
    FILE_COUNT_MAX,
    PERMUTATION_COUNT_MAX,
    STRATEGY_RATIO_THRESHOLD,
)
from rngrename.prompt import ErrorHandlingMode

# Configure logging
logger = logging.getLogger(__name__)

# Handle tomllib/tomli for Python 3.11+ vs earlier versions
tomllib: ModuleType | None
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

DEFAULT_CONFIG_FILE = "rngrename.toml"

# key -> environment variable
_ENV_VARS = {
    "name_length": "RNGRENAME_LENGTH",
    "char_set": "RNGRENAME_CHAR_SET",
    "case": "RNGRENAME_CASE",
    "custom_chars": "RNGRENAME_CUSTOM_CHARS",
    "ext_mode": "RNGRENAME_EXT_MODE",
    "static_ext": "RNGRENAME_STATIC_EXT",
    "prefix": "RNGRENAME_PREFIX",
    "suffix": "RNGRENAME_SUFFIX",
    "confirm_mode": "RNGRENAME_CONFIRM",
    "confirm_batch_size": "RNGRENAME_CONFIRM_BATCH",
    "error_handling_mode": "RNGRENAME_ERROR_MODE",
    "file_count_max": "RNGRENAME_FILE_COUNT_MAX",
    "permutation_count_max": "RNGRENAME_PERMUTATION_COUNT_MAX",
    "strategy_ratio_threshold": "RNGRENAME_STRATEGY_RATIO",
}

_INT_KEYS = {
    "name_length",
    "confirm_batch_size",
    "file_count_max",
    "permutation_count_max",
}

_ENUM_KEYS = {
    "char_set": CharSetSelection,
    "case": Casing,
    "ext_mode": ExtensionModeSelection,
    "confirm_mode": ConfirmMode,
    "error_handling_mode": ErrorHandlingMode,
}


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


class Config:
    """Configuration for rngrename.

    Configuration is loaded with the following priority:
    1. Command-line options (highest priority, applied by the CLI)
    2. Environment variables
    3. Configuration file (TOML format)
    4. Default values (lowest priority)
    """

    def __init__(
        self,
        name_length: int = 8,
        char_set: CharSetSelection = CharSetSelection.BASE16,
        case: Optional[Casing] = None,
        custom_chars: Optional[str] = None,
        ext_mode: ExtensionModeSelection = ExtensionModeSelection.KEEP_LAST,
        static_ext: Optional[str] = None,
        prefix: str = "",
        suffix: str = "",
        confirm_mode: ConfirmMode = ConfirmMode.BATCH,
        confirm_batch_size: int = 10,
        error_handling_mode: ErrorHandlingMode = ErrorHandlingMode.WARN,
        file_count_max: int = FILE_COUNT_MAX,
        permutation_count_max: int = PERMUTATION_COUNT_MAX,
        strategy_ratio_threshold: float = STRATEGY_RATIO_THRESHOLD,
    ):
        """Initialize configuration.

        Raises:
            ConfigError: If configuration values are invalid
        """
        self.name_length = name_length
        self.char_set = char_set
        self.case = case
        self.custom_chars = custom_chars
        self.ext_mode = ext_mode
        self.static_ext = static_ext
        self.prefix = prefix
        self.suffix = suffix
        self.confirm_mode = confirm_mode
        self.confirm_batch_size = confirm_batch_size
        self.error_handling_mode = error_handling_mode
        self.file_count_max = file_count_max
        self.permutation_count_max = permutation_count_max
        self.strategy_ratio_threshold = strategy_ratio_threshold
        self.validate()

    @classmethod
    def from_env_and_file(cls, config_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables and optional config file.

        Environment variables take precedence over config file values. If no
        config file is given, RNGRENAME_CONFIG is used, then rngrename.toml in
        the working directory if it exists.

        Args:
            config_file: Path to TOML config file (optional)

        Returns:
            Config instance with loaded values

        Raises:
            ConfigError: If configuration is invalid
        """
        config_values: Dict[str, Any] = {}

        config_file = config_file or os.environ.get("RNGRENAME_CONFIG")
        if config_file is None and Path(DEFAULT_CONFIG_FILE).exists():
            config_file = DEFAULT_CONFIG_FILE

        # Load from config file if provided
        if config_file:
            config_values.update(cls._load_from_file(config_file))

        # Override with environment variables
        for key, env_var in _ENV_VARS.items():
            if env_var in os.environ:
                config_values[key] = cls._coerce(key, os.environ[env_var], env_var)

        config = cls(**config_values)
        logger.info(f"Configuration loaded: {config}")
        return config

    @classmethod
    def _load_from_file(cls, config_file: str) -> Dict[str, Any]:
        """Load configuration from TOML file.

        Args:
            config_file: Path to TOML config file

        Returns:
            Dictionary of configuration values

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        if tomllib is None:
            raise ConfigError(
                "TOML support not available. Install tomli for Python < 3.11"
            )

        try:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {config_file}")
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to parse config file: {e}")

        unknown = set(data) - set(_ENV_VARS)
        if unknown:
            logger.warning(
                f"Ignoring unknown config keys in {config_file}: {sorted(unknown)}"
            )

        return {
            key: cls._coerce(key, value, config_file)
            for key, value in data.items()
            if key in _ENV_VARS
        }

    @staticmethod
    def _coerce(key: str, value: Any, source: str) -> Any:
        """Convert a raw file or environment value to the type of its key.

        Raises:
            ConfigError: If the value cannot be converted
        """
        try:
            if key in _INT_KEYS:
                if isinstance(value, bool):
                    raise ValueError(value)
                return int(value)
            if key == "strategy_ratio_threshold":
                return float(value)
            if key in _ENUM_KEYS:
                return _ENUM_KEYS[key](value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid {key} from {source}: {value!r}")
        return str(value)

    def validate(self) -> None:
        """Validate value ranges.

        Raises:
            ConfigError: If a value is out of range
        """
        if self.name_length < 0:
            raise ConfigError("Invalid name_length: must not be negative")
        if self.confirm_batch_size < 0:
            raise ConfigError("Invalid confirm_batch_size: must not be negative")
        if self.file_count_max <= 0:
            raise ConfigError("Invalid file_count_max: must be positive")
        if self.permutation_count_max <= 0:
            raise ConfigError("Invalid permutation_count_max: must be positive")
        if not (0 < self.strategy_ratio_threshold <= 1):
            raise ConfigError(
                "Invalid strategy_ratio_threshold: must be in the range (0, 1]"
            )

    def __repr__(self) -> str:
        """String representation of configuration."""
        return (
            f"Config(name_length={self.name_length}, "
            f"char_set={self.char_set.value}, "
            f"case={self.case.value if self.case else None}, "
            f"ext_mode={self.ext_mode.value}, "
            f"confirm_mode={self.confirm_mode.value}, "
            f"error_handling_mode={self.error_handling_mode.value})"
        )
