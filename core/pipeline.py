from pathlib import Path
from typing import Optional, Union

# Importing the packages registers the built-in classifiers and materializers
import core.classifiers  # noqa: F401
import core.materializers  # noqa: F401

from config.models import Config
from core.colors import ColorAllocator
from core.conflicts import ConflictDetector
from core.contracts.classifier import ComponentClassifier
from core.contracts.materializer import TreeMaterializer
from core.contracts.models import FILE_STATUSES, CONFLICT_STATUSES, Change, ChangeReport
from core.metadata import MetadataBuilder, PackageMetadata
from core.packages import PackageResolver
from core.registry import classifier_registry, materializer_registry
from core.report import load_report, save_report
from utils.errors import ConfigError, MaterializationError
from utils.logger import logger


class MetadataAugmenter:
    """
    The main pipeline for augmenting a change report.
    It orchestrates checkout, metadata building and conflict detection.
    """

    def __init__(
        self,
        config: Config,
        resolver: Optional[PackageResolver] = None,
        classifier: Optional[ComponentClassifier] = None,
        materializer: Optional[TreeMaterializer] = None,
        allocator: Optional[ColorAllocator] = None,
    ):
        """
        Initializes the pipeline. Collaborators not passed in are built from the config.

        Raises:
            ConfigError: If a configured classifier/materializer is unknown or
                the project manifest cannot be loaded.
        """
        self.config = config
        self.resolver = resolver or PackageResolver.from_manifest(config.project.manifest)
        self.classifier = classifier or self._create(
            classifier_registry, config.classifier.type, self._classifier_options(config)
        )
        self.materializer = materializer or self._create(
            materializer_registry, config.materializer.type, config.materializer.options
        )
        self.allocator = allocator if allocator is not None else ColorAllocator(config.colors.palette)

        statuses = FILE_STATUSES if config.project.include_deleted else CONFLICT_STATUSES
        self.builder = MetadataBuilder(
            self.resolver,
            self.classifier,
            skip_files=config.project.skip_files,
            statuses=statuses,
        )
        self.detector = ConflictDetector(self.allocator)

    @staticmethod
    def _classifier_options(config: Config) -> dict:
        # The suffix classifier checks files under the tree the materializer checks out
        options = dict(config.classifier.options)
        repo_dir = config.materializer.options.get("repo_dir")
        if repo_dir and config.classifier.type == "suffix":
            options.setdefault("root", repo_dir)
        return options

    @staticmethod
    def _create(registry, name: str, options: dict):
        try:
            return registry.create(name, **options)
        except KeyError as e:
            raise ConfigError(str(e.args[0])) from e
        except TypeError as e:
            raise ConfigError(f"Invalid options for '{name}': {e}") from e

    def augment(self, report: ChangeReport) -> ChangeReport:
        """
        Adds package metadata and conflicts to every change in the report, in place.

        Returns:
            The same report object.
        """
        logger.info("Starting metadata augmentation pipeline...")

        for change_id, change in report.open_prs.items():
            try:
                self.materializer.checkout_change(change_id)
            except MaterializationError as e:
                logger.error(f"Failed to checkout PR #{change_id}, leaving its metadata empty: {e}")
                change.metadata = {}
                continue
            self._build_change(change_id, change)

        baseline = self.config.materializer.baseline_ref
        try:
            self.materializer.checkout_baseline(baseline)
        except MaterializationError as e:
            logger.error(f"Failed to checkout baseline {baseline}, closed PRs use the current tree: {e}")

        for change_id, change in report.closed_prs.items():
            self._build_change(change_id, change)

        self.detector.detect(report.all_changes())
        logger.success("Metadata augmentation pipeline completed successfully!")
        return report

    def _build_change(self, change_id: str, change: Change) -> None:
        metadata: PackageMetadata = {}
        try:
            self.builder.build(change.files, into=metadata)
        except Exception as e:
            logger.error(f"Failed to build metadata for PR #{change_id}, keeping partial result: {e}")
        change.metadata = metadata
        logger.debug(f"PR #{change_id}: {len(metadata)} packages touched")

    def run(self, report_path: Union[str, Path], output_path: Optional[Union[str, Path]] = None) -> ChangeReport:
        """
        Loads, augments and writes back a report. Writes to `report_path` unless `output_path` is given.

        Raises:
            ReportError: If the report cannot be read or written.
        """
        report = load_report(report_path)
        self.augment(report)
        save_report(report, output_path or report_path)
        return report
