from typing import Optional

from core.contracts.materializer import TreeMaterializer
from core.registry import materializer_registry
from utils.git import checkout_pull_request, checkout_ref
from utils.logger import logger


@materializer_registry.register("git")
class GitMaterializer(TreeMaterializer):
    """
    Switches the shared working tree between pull request heads and the baseline.
    """

    def __init__(self, repo_dir: Optional[str] = None):
        """
        Args:
            repo_dir: The repository to operate on. Defaults to the current directory.
        """
        self.repo_dir = repo_dir

    def checkout_change(self, change_id: str) -> None:
        checkout_pull_request(change_id, cwd=self.repo_dir)
        logger.info(f"Checked out PR #{change_id}")

    def checkout_baseline(self, ref: str) -> None:
        checkout_ref(ref, cwd=self.repo_dir)
        logger.info(f"Checked out baseline {ref}")
