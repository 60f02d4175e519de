#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("changelog")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. CHANGELOG_CONFIG environment variable
    2. ~/.changelog/ directory
    """
    if 'CHANGELOG_CONFIG' in os.environ:
        path = Path(os.environ['CHANGELOG_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.changelog'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path
    return config_dir / 'config.json'


def load_config():
    """Load configuration from file, defaults and environment overrides."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() == '.toml':
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f)
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            if isinstance(file_config, dict):
                config = merge_configs(config, file_config)
            elif file_config is not None:
                logger.error(f"Ignoring config at {config_path}: top level must be a mapping")
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "http": {
            "timeout_seconds": 10,
            "user_agent": "changelog-cli"
        },
        "subprocess": {
            "timeout_seconds": 15
        },
        "github": {
            "token": "",
            "use_gh_cli": True,
            "api_url": "https://api.github.com"
        },
        "classifier": {
            # /usr/local/bin is shared by Homebrew (Intel macOS) and pip;
            # an empty string turns the guess off.
            "ambiguous_default": "brew"
        },
        "changelog": {
            "filenames": [
                "CHANGELOG.md",
                "Changelog.md",
                "changelog.md",
                "CHANGES.md",
                "HISTORY.md",
                "NEWS.md",
                "CHANGELOG.rst",
                "CHANGES.rst",
                "HISTORY.rst",
                "CHANGELOG"
            ]
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        }
    }


def get_setting(config, section, key, default=None):
    """Read ``config[section][key]`` tolerating missing or mistyped sections."""
    if config is None:
        config = load_config()
    value = config.get(section, {})
    if not isinstance(value, dict):
        return default
    return value.get(key, default)


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: CHANGELOG_SECTION_KEY
    For example: CHANGELOG_HTTP_TIMEOUT_SECONDS=5
    """
    env_prefix = "CHANGELOG_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config


def configure_logging(config=None, debug=False):
    """Apply the configured log level to the package logger."""
    if debug:
        logger.setLevel(logging.DEBUG)
        return
    level_name = str(get_setting(config, 'logging', 'level', 'WARNING')).upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))
