from typing import Dict, Iterable, Optional, Sequence

from core.contracts.classifier import ComponentClassifier
from core.contracts.models import (
    CONFLICT_STATUSES,
    ChangeFiles,
    Component,
    ComponentDescriptor,
    PackageBuckets,
)
from core.packages import PackageResolver
from utils.errors import ClassificationError
from utils.logger import logger

PackageMetadata = Dict[str, PackageBuckets]


class MetadataBuilder:
    """
    Turns a change's categorized file lists into package -> status -> components.
    """

    def __init__(
        self,
        resolver: PackageResolver,
        classifier: ComponentClassifier,
        skip_files: Iterable[str] = ("sfdx-project.json",),
        statuses: Sequence[str] = CONFLICT_STATUSES,
    ):
        self.resolver = resolver
        self.classifier = classifier
        self.skip_files = tuple(skip_files)
        self.statuses = tuple(statuses)

    def build(self, files: Optional[ChangeFiles], into: Optional[PackageMetadata] = None) -> PackageMetadata:
        """
        Builds the package metadata for one change.

        Args:
            files: The change's added/modified/deleted paths. None yields empty metadata.
            into: Accumulator to fill. Lets the caller keep what was built
                if an unexpected error aborts the change halfway.

        Returns:
            The filled metadata mapping.
        """
        metadata: PackageMetadata = into if into is not None else {}
        if files is None:
            return metadata

        for status in self.statuses:
            for path in getattr(files, status):
                self._add_file(metadata, path, status)
        return metadata

    def _add_file(self, metadata: PackageMetadata, path: str, status: str) -> None:
        if any(skip in path for skip in self.skip_files):
            logger.debug(f"Skipping manifest file {path}")
            return

        try:
            descriptors: Sequence[ComponentDescriptor] = self.classifier.classify(path)
        except ClassificationError as e:
            logger.warning(f"Error processing file {path}: {e}")
            return
        except Exception as e:
            logger.warning(f"Unexpected error classifying {path}, skipping: {e}")
            return

        if not descriptors:
            return

        package_name = self.resolver.resolve(path)
        bucket = metadata.setdefault(package_name, PackageBuckets()).bucket(status)
        for descriptor in descriptors:
            if any(c.name == descriptor.name and c.type == descriptor.type for c in bucket):
                continue
            bucket.append(Component(name=descriptor.name, type=descriptor.type))
