import json
import posixpath
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, ValidationError

from utils.errors import ConfigError
from utils.logger import logger

UNKNOWN_PACKAGE = "Unknown Package"


class PackageDirectory(BaseModel):
    path: str
    package: Optional[str] = None


def normalize_path(path: str) -> str:
    """Collapses separators and redundant segments so paths compare the same on every platform."""
    return posixpath.normpath(path.replace("\\", "/"))


def normalize_root(path: str) -> str:
    """Like normalize_path, but a trailing separator is kept so the root only matches inside that directory."""
    normalized = normalize_path(path)
    if path.endswith(("/", "\\")) and not normalized.endswith("/"):
        normalized += "/"
    return normalized


class PackageResolver:
    """
    Maps file paths to the logical package that owns them.

    Directories are checked in declaration order and the first one whose
    root path appears in the file path wins. Overlapping roots are not
    disambiguated.
    """

    def __init__(self, directories: Iterable[PackageDirectory]):
        self.directories: List[PackageDirectory] = list(directories)
        self._roots = [normalize_root(d.path) for d in self.directories]

    @classmethod
    def from_manifest(cls, manifest_path: Union[str, Path]) -> "PackageResolver":
        """
        Loads the `packageDirectories` table from a project manifest (sfdx-project.json).

        Raises:
            ConfigError: If the manifest is missing, not JSON, or malformed.
        """
        try:
            with open(manifest_path, "r", encoding="utf-8") as f:
                manifest = json.load(f)
        except OSError as e:
            raise ConfigError(f"Could not read project manifest {manifest_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Project manifest {manifest_path} is not valid JSON: {e}") from e

        entries = manifest.get("packageDirectories", []) if isinstance(manifest, dict) else None
        if not isinstance(entries, list):
            raise ConfigError(f"'packageDirectories' in {manifest_path} must be a list.")
        try:
            directories = [PackageDirectory(**entry) for entry in entries]
        except (TypeError, ValidationError) as e:
            raise ConfigError(f"Invalid package directory in {manifest_path}: {e}") from e

        logger.info(f"Loaded {len(directories)} package directories from {manifest_path}")
        return cls(directories)

    def resolve(self, file_path: str) -> str:
        """Returns the owning package name, or UNKNOWN_PACKAGE when no directory matches."""
        normalized = normalize_path(file_path)
        for directory, root in zip(self.directories, self._roots):
            if root in normalized:
                return directory.package or UNKNOWN_PACKAGE
        return UNKNOWN_PACKAGE
