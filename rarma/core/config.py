'''
Configuration management system for the RARMA Toolbox.

Settings live in a small number of dataclass sections and are resolved in
layers:
1. Defaults built into the package
2. A user configuration file (``rarma_config.json``), when one exists
3. Environment variables with the ``RARMA_`` prefix
4. Runtime modifications through ``set_config``

Nothing is written to disk unless ``save_config`` is called explicitly.
'''

import os
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError

# Set up module-level logger
logger = logging.getLogger("rarma.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "RARMA_"
DEFAULT_CONFIG_FILENAME = "rarma_config.json"
USER_CONFIG_DIR_ENV = "RARMA_CONFIG_DIR"

VALID_OPTIMIZATION_METHODS = (
    "L-BFGS-B", "BFGS", "CG", "TNC", "SLSQP", "Powell", "Nelder-Mead"
)
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    CORE = "core"
    NUMERICAL = "numerical"
    LOGGING = "logging"


@dataclass
class CoreConfig:
    """
    Core configuration settings.

    Attributes:
        user_config_dir: Directory searched for the user configuration file
        random_seed: Default seed for simulation (None for fresh entropy)
    """
    user_config_dir: Path = field(default_factory=lambda: Path.home() / ".rarma")
    random_seed: Optional[int] = None


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings.

    Attributes:
        optimization_method: Default ``scipy.optimize.minimize`` method
        optimization_tol: Optimizer convergence tolerance
        max_iterations: Maximum number of optimizer iterations
        finite_difference_step: Step for central differences (None for automatic)
        scale_tol: Relative tolerance of the M-scales evaluated inside the objectives
        scale_max_iter: Iteration cap of the M-scale fixed-point iteration
        impulse_response_lags: Number of MA(infinity) lags used for the BIP sigma
    """
    optimization_method: str = "L-BFGS-B"
    optimization_tol: float = 1e-8
    max_iterations: int = 1000
    finite_difference_step: Optional[float] = None
    scale_tol: float = 1e-10
    scale_max_iter: int = 100
    impulse_response_lags: int = 100


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Level of the ``rarma`` package logger
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to attach a console handler
        solver_logging: Whether optimizer and JIT compiler chatter is let through
    """
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True
    solver_logging: bool = False


@dataclass
class RARMAConfig:
    """
    Complete configuration for the RARMA Toolbox.

    Attributes:
        core: Core configuration settings
        numerical: Numerical configuration settings
        logging: Logging configuration settings
    """
    core: CoreConfig = field(default_factory=CoreConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Configuration manager for the RARMA Toolbox.

    Holds the current configuration and implements the layered lookup
    described in the module docstring.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the configuration manager has been initialized
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = RARMAConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        Resolves the user configuration file, loads it when present, applies
        environment overrides, validates the result and configures logging.
        """
        if self._initialized:
            return

        self._resolve_user_config_dir()
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _resolve_user_config_dir(self) -> None:
        """Resolve the user configuration directory without creating it."""
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            self._config.core.user_config_dir = Path(env_config_dir)
        self._config_file = self._config.core.user_config_dir / DEFAULT_CONFIG_FILENAME

    def _load_user_config(self) -> None:
        """Load user configuration from file, if one exists."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """
        Apply environment variable overrides to the configuration.

        Variables are named ``RARMA_<SECTION>_<OPTION>``, for example
        ``RARMA_NUMERICAL_MAX_ITERATIONS=200``.
        """
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == USER_CONFIG_DIR_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = self._coerce(getattr(section_obj, option), value)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")
                continue

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    @staticmethod
    def _coerce(current_value: Any, value: Any) -> Any:
        """Convert ``value`` to the type of ``current_value``."""
        if isinstance(value, str):
            if current_value is None:
                # Optional numeric options
                if value.strip().lower() in ("", "none", "null"):
                    return None
                try:
                    return int(value)
                except ValueError:
                    return float(value)
            if isinstance(current_value, bool):
                return value.lower() in ('true', 'yes', '1', 'y')
        if current_value is None or value is None:
            return value
        if isinstance(current_value, Path):
            return Path(value)
        if isinstance(current_value, bool):
            return bool(value)
        if type(current_value) is not type(value):
            return type(current_value)(value)
        return value

    def _setup_logging(self) -> None:
        """Configure the ``rarma`` package logger from the logging section."""
        package_logger = logging.getLogger("rarma")

        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)

        package_logger.setLevel(getattr(logging, self._config.logging.log_level))

        if self._config.logging.console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter(
                fmt=self._config.logging.log_format,
                datefmt=self._config.logging.log_date_format
            ))
            package_logger.addHandler(console_handler)

    def _validate_config(self) -> None:
        """Validate every section, correcting invalid values with a warning."""
        for section_name in self.get_sections():
            section = getattr(self._config, section_name)
            for attr_name in section.__dataclass_fields__:
                self._validate_constraint(section, attr_name, getattr(section, attr_name))

    def _validate_constraint(self, section: Any, attr_name: str, value: Any) -> None:
        """
        Validate a specific constraint on a configuration value.

        Args:
            section: The configuration section
            attr_name: The attribute name
            value: The attribute value
        """
        if attr_name in ("max_iterations", "scale_max_iter") and value <= 0:
            default = 1000 if attr_name == "max_iterations" else 100
            logger.warning(f"Invalid {attr_name}: {value}, must be positive")
            setattr(section, attr_name, default)

        elif attr_name == "impulse_response_lags" and value < 2:
            logger.warning(f"Invalid impulse_response_lags: {value}, must be at least 2")
            setattr(section, attr_name, 100)

        elif attr_name in ("optimization_tol", "scale_tol") and (value <= 0 or value >= 1):
            default = 1e-8 if attr_name == "optimization_tol" else 1e-10
            logger.warning(f"Invalid {attr_name}: {value}, must be between 0 and 1")
            setattr(section, attr_name, default)

        elif attr_name == "finite_difference_step" and value is not None and (value <= 0 or value >= 1):
            logger.warning(f"Invalid finite_difference_step: {value}, using automatic step")
            setattr(section, attr_name, None)

        elif attr_name == "optimization_method" and value not in VALID_OPTIMIZATION_METHODS:
            logger.warning(f"Invalid optimization_method: {value}, using L-BFGS-B")
            setattr(section, attr_name, "L-BFGS-B")

        elif attr_name == "log_level":
            if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
                logger.warning(f"Invalid log level: {value}, using INFO")
                setattr(section, attr_name, "INFO")
            else:
                setattr(section, attr_name, value.upper())

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update the configuration from a dictionary.

        Args:
            config_dict: Dictionary containing configuration values
        """
        for section_name, section_dict in config_dict.items():
            if not self.has_section(section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)
            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue
                try:
                    typed_value = self._coerce(getattr(section, option_name), option_value)
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to set {section_name}.{option_name}: {e}")
                    continue
                setattr(section, option_name, typed_value)

    def save_user_config(self) -> Optional[Path]:
        """
        Save the current configuration to the user configuration file.

        Returns:
            The path written to
        """
        if not self._config_file:
            self._resolve_user_config_dir()

        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise ConfigurationError(
                "Failed to save user configuration",
                config_file=self._config_file,
                issue=str(e)
            ) from e

        logger.debug(f"Saved user configuration to {self._config_file}")
        return self._config_file

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary representation of the configuration
        """
        result = {}
        for section_name in self.get_sections():
            section = getattr(self._config, section_name)
            section_dict = {}
            for field_name in section.__dataclass_fields__:
                value = getattr(section, field_name)
                if isinstance(value, Path):
                    value = str(value)
                section_dict[field_name] = value
            result[section_name] = section_dict
        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        if not self.has_option(section, option):
            return default
        return getattr(getattr(self._config, section), option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            value: The value to set

        Raises:
            ConfigurationError: If the section or option is not found or the
                value cannot be converted
        """
        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=f"{section}.{option}",
                value=value,
                issue="Section not found"
            )

        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        try:
            typed_value = self._coerce(getattr(section_obj, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        setattr(section_obj, option, typed_value)
        self._validate_constraint(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The configuration option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        defaults = RARMAConfig()

        if section is None:
            self._config = defaults
            self._modified_keys.clear()
            logger.debug("Reset all configuration options to defaults")
            return

        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )

        if option is None:
            setattr(self._config, section, getattr(defaults, section))
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            logger.debug(f"Reset configuration section: {section}")
            return

        if not self.has_option(section, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )

        setattr(getattr(self._config, section), option, getattr(getattr(defaults, section), option))
        self._modified_keys.discard(f"{section}.{option}")
        logger.debug(f"Reset configuration option: {section}.{option}")

    def get_modified_options(self) -> Dict[str, Dict[str, Any]]:
        """
        Get a dictionary of modified configuration options.

        Returns:
            Dictionary of modified options with their current values
        """
        result: Dict[str, Dict[str, Any]] = {}
        for key in self._modified_keys:
            section, option = key.split(".", 1)
            result.setdefault(section, {})[option] = self.get(section, option)
        return result

    def has_section(self, section: str) -> bool:
        """Check if a configuration section exists."""
        return section in self._config.__dataclass_fields__

    def has_option(self, section: str, option: str) -> bool:
        """Check if a configuration option exists."""
        if not self.has_section(section):
            return False
        return option in getattr(self._config, section).__dataclass_fields__

    def get_sections(self) -> List[str]:
        """Get a list of all configuration sections."""
        return list(self._config.__dataclass_fields__)

    def get_section(self, section: str) -> Any:
        """
        Get a configuration section object.

        Raises:
            ConfigurationError: If the section is not found
        """
        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return getattr(self._config, section)


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Initialize the configuration system (idempotent)."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()
    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()
    _config_manager.reset(section, option)


def save_config() -> Optional[Path]:
    """Save the current configuration to the user configuration file."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.save_user_config()


def get_config_manager() -> ConfigManager:
    """Get the configuration manager instance."""
    return _config_manager


def get_numerical_config() -> NumericalConfig:
    """
    Get the numerical configuration section.

    Returns:
        The live numerical configuration object
    """
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section("numerical")


def get_logging_config() -> LoggingConfig:
    """
    Get the logging configuration section.

    Returns:
        The live logging configuration object
    """
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section("logging")
