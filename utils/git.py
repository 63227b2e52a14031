import subprocess
from typing import Optional

from utils.errors import MaterializationError


def is_git_repository(cwd: Optional[str] = None) -> bool:
    """Checks if the given (or current) directory is a Git repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
        return result.stdout.strip() == "true"
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def checkout_ref(ref: str, cwd: Optional[str] = None) -> None:
    """
    Checks out a branch, tag or commit into the working tree.

    Args:
        ref: The revision to check out.
        cwd: The repository directory. Defaults to the current directory.

    Raises:
        MaterializationError: If the git checkout command fails.
    """
    try:
        subprocess.run(
            ["git", "checkout", ref],
            check=True,
            capture_output=True,
            text=True,
            cwd=cwd,
        )
    except FileNotFoundError:
        raise MaterializationError("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        error_message = (e.stderr or "").strip()
        raise MaterializationError(f"Failed to check out '{ref}': {error_message}")


def checkout_pull_request(number: str, cwd: Optional[str] = None) -> None:
    """
    Checks out the head branch of a pull request using the GitHub CLI.

    Args:
        number: The pull request number.
        cwd: The repository directory. Defaults to the current directory.

    Raises:
        MaterializationError: If `gh` is missing or the checkout fails.
    """
    try:
        subprocess.run(
            ["gh", "pr", "checkout", str(number)],
            check=True,
            capture_output=True,
            text=True,
            cwd=cwd,
        )
    except FileNotFoundError:
        raise MaterializationError("GitHub CLI (gh) is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        error_message = (e.stderr or "").strip()
        raise MaterializationError(f"Failed to check out PR #{number}: {error_message}")
