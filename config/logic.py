import collections.abc
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config.loader import load_config_file
from config.models import Config
from utils.errors import ConfigError
from utils.logger import logger

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
USER_CONFIG_DIR = Path.home() / ".conflictscope"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILENAME = ".conflictscope.yaml"


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges two dictionaries.
    Arrays are replaced, not merged.
    """
    for key, value in source.items():
        if isinstance(value, collections.abc.Mapping) and key in target and isinstance(target[key], collections.abc.Mapping):
            target[key] = deep_merge(dict(target[key]), value)
        else:
            target[key] = value
    return target


def find_project_root(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the project root by searching upwards for a .git directory or pyproject.toml.
    """
    d = start_dir.resolve()
    while d != d.parent:
        if (d / ".git").is_dir() or (d / "pyproject.toml").is_file():
            return d
        d = d.parent
    return None


def find_project_config(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the project-specific configuration file (.conflictscope.yaml) in the project root.
    """
    project_root = find_project_root(start_dir)
    if project_root:
        project_config_path = project_root / PROJECT_CONFIG_FILENAME
        if project_config_path.is_file():
            return project_config_path
    return None


def load_and_merge_configs(custom_config_path: Optional[str] = None) -> Config:
    """
    Loads all configurations (default, user, project) and merges them.
    A custom config path can be provided to override all others.

    Raises:
        ConfigError: If a required file is missing or the merged result is invalid.
    """
    config_paths: List[Path] = []

    if DEFAULT_CONFIG_PATH.is_file():
        config_paths.append(DEFAULT_CONFIG_PATH)
    else:
        raise ConfigError("Default configuration file not found.")

    if USER_CONFIG_PATH.is_file():
        config_paths.append(USER_CONFIG_PATH)

    project_config_path = find_project_config()
    if project_config_path:
        config_paths.append(project_config_path)

    # A custom config path given on the CLI replaces every other layer.
    if custom_config_path:
        path = Path(custom_config_path)
        if not path.is_file():
            raise ConfigError(f"Custom config file not found at: {custom_config_path}")
        config_paths = [path]
        logger.info(f"Using custom configuration from: {custom_config_path}")

    merged_config: Dict[str, Any] = {}
    for path in config_paths:
        logger.info(f"Loading configuration from: {path}")
        try:
            merged_config = deep_merge(merged_config, load_config_file(path))
        except ConfigError as e:
            if path == DEFAULT_CONFIG_PATH or custom_config_path:
                raise
            logger.warning(f"Could not load or parse config at {path}: {e}")

    try:
        final_config = Config(**merged_config)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
    logger.debug(f"Final merged config: {final_config.model_dump_json(indent=2)}")
    return final_config
