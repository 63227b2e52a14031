from typing import Protocol


class TreeMaterializer(Protocol):
    """A protocol for classes that make a revision's files available on disk."""

    def checkout_change(self, change_id: str) -> None:
        """
        Checks out the head revision of an open change.

        Raises:
            MaterializationError: If the checkout fails.
        """
        ...

    def checkout_baseline(self, ref: str) -> None:
        """
        Checks out the stable baseline revision.

        Raises:
            MaterializationError: If the checkout fails.
        """
        ...
