from core.contracts.materializer import TreeMaterializer
from core.registry import materializer_registry
from utils.logger import logger


@materializer_registry.register("noop")
class NoopMaterializer(TreeMaterializer):
    """Leaves the working tree as the caller prepared it."""

    def checkout_change(self, change_id: str) -> None:
        logger.debug(f"Not checking out PR #{change_id} (noop materializer)")

    def checkout_baseline(self, ref: str) -> None:
        logger.debug(f"Not checking out baseline {ref} (noop materializer)")
