"""
Configuration management for dashmath.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
"""

import os
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional
from copy import deepcopy
import yaml

# Set up logging
logger = logging.getLogger(__name__)


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_bool(value: Any) -> Optional[bool]:
    """
    Convert a value to a boolean.

    Args:
        value: Value to convert

    Returns:
        Boolean value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return bool(value)

    if isinstance(value, str):
        value = value.lower().strip()
        if value in ('true', 'yes', 'y', '1', 't'):
            return True
        if value in ('false', 'no', 'n', '0', 'f'):
            return False

    return None


def env_value(name: str, convert: Callable[[Any], Any], default: Any) -> Any:
    """
    Read and convert an environment variable.

    Unset or unparseable variables fall back to the default.

    Args:
        name: Environment variable name
        convert: Conversion function returning None on failure
        default: Value used when the variable is unset or invalid

    Returns:
        Converted value, or default
    """
    if name not in os.environ:
        return default

    value = convert(os.environ[name])
    if value is None:
        logger.warning(f"Ignoring invalid value for {name}: {os.environ[name]!r}")
        return default

    return value


class Config:
    """
    Configuration manager for dashmath.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            config = self._get_defaults()
            config = self._apply_env_vars(config)

            if overrides:
                config = self._apply_overrides(config, overrides)

            config = self._apply_inferred_values(config)

            self._config = config
            self._initialized = True

            logger.info("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # Environment
            'math-env': 'dev',

            # Server
            'server': {
                'port': 8080,
                'host': 'localhost'
            },

            # Eigensolver / PCA
            'pca': {
                'max-iterations': 100,
                'tolerance': 1e-9,
                'components': 3          # projected components (PC1..PC3)
            },

            # Classification
            'classifier': {
                'default-model': 'bayes'  # 'bayes' or 'mindist'
            },

            # Analysis pipeline
            'analysis': {
                'normalize': True,        # z-score features before PCA
                'min-pca-rows': 3,
                'min-pca-features': 2
            },

            # Likelihood surfaces
            'density': {
                'grid-steps': 50,
                'padding': 0.2
            },

            # Built-in datasets
            'datasets': {
                'load-synthetic': True,
                'seed': 42
            },

            # Analysis result cache
            'cache': {
                'max-entries': 128
            },

            # Logging
            'logging': {
                'level': 'warn'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        # Environment
        if 'DASHMATH_ENV' in os.environ:
            config['math-env'] = os.environ['DASHMATH_ENV']

        # Server
        config['server']['port'] = env_value('PORT', to_int, config['server']['port'])
        config['server']['host'] = os.environ.get('HOST', config['server']['host'])

        # PCA
        config['pca']['max-iterations'] = env_value('PCA_MAX_ITERATIONS', to_int, config['pca']['max-iterations'])
        config['pca']['tolerance'] = env_value('PCA_TOLERANCE', to_float, config['pca']['tolerance'])
        config['pca']['components'] = env_value('PCA_COMPONENTS', to_int, config['pca']['components'])

        # Classification
        config['classifier']['default-model'] = os.environ.get('DEFAULT_MODEL', config['classifier']['default-model'])

        # Analysis
        config['analysis']['normalize'] = env_value('USE_NORMALIZATION', to_bool, config['analysis']['normalize'])

        # Density
        config['density']['grid-steps'] = env_value('DENSITY_GRID_STEPS', to_int, config['density']['grid-steps'])
        config['density']['padding'] = env_value('DENSITY_PADDING', to_float, config['density']['padding'])

        # Datasets
        config['datasets']['load-synthetic'] = env_value('LOAD_SYNTHETIC', to_bool, config['datasets']['load-synthetic'])
        config['datasets']['seed'] = env_value('SYNTHETIC_SEED', to_int, config['datasets']['seed'])

        # Cache
        config['cache']['max-entries'] = env_value('CACHE_MAX_ENTRIES', to_int, config['cache']['max-entries'])

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        return deep_update(config, overrides)

    def _apply_inferred_values(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply inferred configuration values.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        config['math-env-string'] = str(config['math-env'])
        config['server-url'] = f"http://{config['server']['host']}:{config['server']['port']}"

        return config

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        value = self._config
        for component in path.split('.'):
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            components = path.split('.')
            config = self._config

            for component in components[:-1]:
                if component not in config:
                    config[component] = {}
                config = config[component]

            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration (.json, .yaml or .yml)
        """
        if not self._initialized:
            self.load_config()

        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Args:
            filepath: Path to load configuration from (.json, .yaml or .yml)
        """
        self.load_config(load_config_file(filepath))


def load_config_file(filepath: str) -> Dict[str, Any]:
    """
    Read configuration overrides from a file.

    Args:
        filepath: Path to a .json, .yaml or .yml file

    Returns:
        Configuration dictionary
    """
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f)
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported configuration file format: {filepath}")


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Discard the configuration instance."""
        with cls._lock:
            cls._instance = None
