from typing import Protocol, Sequence

from .models import ComponentDescriptor


class ComponentClassifier(Protocol):
    """A protocol for classes that map a file path to structural components."""

    def classify(self, path: str) -> Sequence[ComponentDescriptor]:
        """
        Returns the components implied by the file at `path`.

        Raises:
            ClassificationError: If the path cannot be classified.
        """
        ...
