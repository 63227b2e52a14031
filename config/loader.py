import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, IO, Union

from utils.errors import ConfigError

# Matches ${VAR_NAME} anywhere inside a scalar
ENV_VAR_MATCHER = re.compile(r"\$\{(\w+)\}")


class EnvVarLoader(yaml.SafeLoader):
    """SafeLoader that expands ${VAR} references from the environment."""


def _substitute(match: "re.Match[str]") -> str:
    env_var = match.group(1)
    replacement = os.getenv(env_var)
    if replacement is None:
        raise ConfigError(f"Environment variable '{env_var}' not found for substitution in config.")
    return replacement


def _env_var_constructor(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    """
    Custom YAML constructor to substitute environment variables.
    e.g., ${GITHUB_REPO} or https://${HOST}/api are expanded in place
    (plain, unquoted scalars only).
    """
    value = loader.construct_scalar(node)
    return ENV_VAR_MATCHER.sub(_substitute, value)


EnvVarLoader.add_constructor("!env", _env_var_constructor)
EnvVarLoader.add_implicit_resolver("!env", re.compile(r".*\$\{\w+\}.*"), None)


def load_config(config_file: IO[str]) -> Dict[str, Any]:
    """
    Loads a YAML configuration file.

    Args:
        config_file: A file-like object representing the YAML configuration.

    Returns:
        A dictionary containing the configuration.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    try:
        config = yaml.load(config_file, Loader=EnvVarLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}") from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration root must be a mapping, got {type(config).__name__}.")
    return config


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Opens and parses a YAML configuration file from disk."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return load_config(f)
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {path}: {e}") from e
