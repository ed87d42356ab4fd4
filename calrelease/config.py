#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import logging
import sys

import toml
import yaml

from .exit_codes import ConfigError
from .infra.credentials import default_ssh_key_path

logger = logging.getLogger("calrelease")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def configure_logging(level: str = "INFO", verbose: bool = False) -> None:
    """
    Configure the calrelease logger to write to stderr.

    Args:
        level: Level name from configuration
        verbose: Force DEBUG regardless of ``level``
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.handlers = [handler]
    logger.propagate = False
    if verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. CALRELEASE_CONFIG environment variable
    2. ~/.calrelease/ directory
    """
    if 'CALRELEASE_CONFIG' in os.environ:
        path = Path(os.environ['CALRELEASE_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.calrelease'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "release": {
            "date_format": "%Y.%m",
            "increment_format": ".%03d",
            "always_include_number": True,
            "default_component": "release",
        },
        "remote": {
            "name": "origin",
            "push": True,
            "ssh_key": default_ssh_key_path(),
        },
        "identity": {
            "name": "",
            "email": "",
        },
        "logging": {
            "level": "INFO",
        },
    }


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ['.yaml', '.yml']:
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config():
    """
    Load configuration from file.

    Raises:
        ConfigError: If the config file exists but cannot be parsed
    """
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config from {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        logger.debug(f"Loaded config from {config_path}")
        config = merge_configs(config, file_config)

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config, config_path: Optional[Path] = None) -> Path:
    """Save configuration to file."""
    config_path = config_path or get_config_path()

    # Create directory if it doesn't exist
    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'w') as f:
            toml.dump(config, f)
    elif suffix in ['.yaml', '.yml']:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    else:
        # Default to JSON format
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


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
    Environment variables follow the pattern: CALRELEASE_SECTION_KEY
    For example: CALRELEASE_REMOTE_NAME=upstream
    """
    env_prefix = "CALRELEASE_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == 'CALRELEASE_CONFIG':
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


def resolve_identity(
    config: Dict[str, Any],
    user: str = "",
    email: str = "",
    git_client=None,
) -> Tuple[str, str]:
    """
    Work out the tagger identity.

    Explicit arguments win, then the global git configuration, then the
    'identity' section of the calrelease config. Either value may come
    back empty; that only matters for annotated tags.
    """
    if not user or not email:
        if git_client is not None:
            user = user or git_client.global_config('user.name') or ""
            email = email or git_client.global_config('user.email') or ""
        if not user or not email:
            logger.debug("unable to load identity from git config, this is only a problem if you're using annotated tags")
    identity = config.get('identity', {})
    return user or identity.get('name', ''), email or identity.get('email', '')
