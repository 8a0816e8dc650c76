"""
Configuration loading utilities for metabox panels.

This module provides functionality to load and validate application
configuration with fallback to defaults.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.yaml")


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Metabox Panels',
            'version': '1.0.0',
            'debug': False
        },
        'panel': {
            'nonce_field': 'metabox_nonce',
            'nonce_action': 'metabox_save_data',
            'error_option_prefix': 'metabox_errors_',
            'meta_prefix': '_mb_'
        },
        'security': {
            'nonce_lifetime': 86400,
            'nonce_secret': None
        },
        'storage': {
            'path': 'data/store.json'
        },
        'schema': {
            'directory': 'schemas'
        },
        'ui': {
            'page_title': 'Edit Course'
        },
        'logging': {
            'level': 'INFO'
        }
    }


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = CONFIG_FILE

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)

        if user_config is None:
            logger.warning(f"Configuration file is empty: {config_path}")
            return default_config

        if not isinstance(user_config, dict):
            logger.error(f"Configuration file is not a valid dictionary: {config_path}")
            logger.info("Using default configuration")
            return default_config

        config = deep_merge(default_config, user_config)

        logger.info(f"Successfully loaded configuration from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config

    except (IOError, OSError) as e:
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and required fields.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    required_sections = ['app', 'panel', 'security', 'storage', 'schema']

    for section in required_sections:
        if not isinstance(config.get(section), dict):
            logger.warning(f"Missing required configuration section: {section}")
            return False

    panel = config['panel']
    for key in ['nonce_field', 'nonce_action', 'error_option_prefix']:
        if not isinstance(panel.get(key), str) or not panel.get(key):
            logger.warning(f"Panel setting must be a non-empty string: {key}")
            return False

    try:
        lifetime = int(config['security'].get('nonce_lifetime', 86400))
        if lifetime <= 0:
            logger.warning("nonce_lifetime must be positive")
            return False
    except (ValueError, TypeError):
        logger.warning("nonce_lifetime must be a valid integer")
        return False

    if not isinstance(config['storage'].get('path'), str):
        logger.warning("storage.path must be a string")
        return False

    return True


def get_config_value(config: Dict[str, Any], section: str, key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        config: Configuration dictionary
        section: Configuration section (e.g., 'panel', 'storage')
        key: Configuration key within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    section_values = config.get(section) or {}
    if not isinstance(section_values, dict):
        return default
    return section_values.get(key, default)
