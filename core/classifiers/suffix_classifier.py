from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple

from core.contracts.classifier import ComponentClassifier
from core.contracts.models import ComponentDescriptor
from core.packages import normalize_path
from core.registry import classifier_registry
from utils.errors import ClassificationError

# Salesforce DX source-format suffixes, longest first so "-meta.xml" variants win.
DEFAULT_SUFFIX_TYPES: Tuple[Tuple[str, str], ...] = (
    (".cls-meta.xml", "ApexClass"),
    (".trigger-meta.xml", "ApexTrigger"),
    (".page-meta.xml", "ApexPage"),
    (".component-meta.xml", "ApexComponent"),
    (".resource-meta.xml", "StaticResource"),
    (".email-meta.xml", "EmailTemplate"),
    (".object-meta.xml", "CustomObject"),
    (".field-meta.xml", "CustomField"),
    (".recordType-meta.xml", "RecordType"),
    (".listView-meta.xml", "ListView"),
    (".validationRule-meta.xml", "ValidationRule"),
    (".webLink-meta.xml", "WebLink"),
    (".compactLayout-meta.xml", "CompactLayout"),
    (".flow-meta.xml", "Flow"),
    (".layout-meta.xml", "Layout"),
    (".permissionset-meta.xml", "PermissionSet"),
    (".profile-meta.xml", "Profile"),
    (".labels-meta.xml", "CustomLabels"),
    (".tab-meta.xml", "CustomTab"),
    (".app-meta.xml", "CustomApplication"),
    (".flexipage-meta.xml", "FlexiPage"),
    (".md-meta.xml", "CustomMetadata"),
    (".quickAction-meta.xml", "QuickAction"),
    (".globalValueSet-meta.xml", "GlobalValueSet"),
    (".customPermission-meta.xml", "CustomPermission"),
    (".namedCredential-meta.xml", "NamedCredential"),
    (".remoteSite-meta.xml", "RemoteSiteSetting"),
    (".cls", "ApexClass"),
    (".trigger", "ApexTrigger"),
    (".page", "ApexPage"),
    (".component", "ApexComponent"),
    (".resource", "StaticResource"),
    (".email", "EmailTemplate"),
)

# Types stored under objects/<Object>/<folder>/ and named "<Object>.<Child>"
OBJECT_CHILD_TYPES = {"CustomField", "RecordType", "ListView", "ValidationRule", "WebLink", "CompactLayout"}

# Directory name -> bundle type; every file in the bundle folder belongs to one component
BUNDLE_DIRECTORIES = {
    "lwc": "LightningComponentBundle",
    "aura": "AuraDefinitionBundle",
}


@classifier_registry.register("suffix")
class SuffixClassifier(ComponentClassifier):
    """
    Classifies Salesforce DX source files by their path alone.

    Lightning bundles are recognised by their `lwc/` or `aura/` folder,
    everything else by file suffix. Object children such as fields are
    qualified with their object name. With `require_exists`, paths that are
    not present under `root` fail classification, so results follow the
    tree that is currently checked out.
    """

    def __init__(
        self,
        types: Optional[Dict[str, str]] = None,
        require_exists: bool = True,
        root: str = ".",
    ):
        merged = dict(DEFAULT_SUFFIX_TYPES)
        merged.update(types or {})
        self.suffix_types: List[Tuple[str, str]] = sorted(merged.items(), key=lambda item: len(item[0]), reverse=True)
        self.require_exists = require_exists
        self.root = Path(root)

    def classify(self, path: str) -> Sequence[ComponentDescriptor]:
        normalized = PurePosixPath(normalize_path(path))
        if self.require_exists and not (self.root / normalized).exists():
            raise ClassificationError(f"{path} does not exist in the working tree")

        bundle = self._bundle(normalized)
        if bundle:
            return [bundle]

        filename = normalized.name
        for suffix, component_type in self.suffix_types:
            if filename.endswith(suffix) and len(filename) > len(suffix):
                name = filename[: -len(suffix)]
                if component_type in OBJECT_CHILD_TYPES:
                    name = self._qualify(normalized, name)
                return [ComponentDescriptor(name=name, type=component_type)]

        raise ClassificationError(f"Could not infer a metadata type for {path}")

    def _bundle(self, path: PurePosixPath) -> Optional[ComponentDescriptor]:
        parts = path.parts
        for index, part in enumerate(parts[:-2]):
            bundle_type = BUNDLE_DIRECTORIES.get(part)
            if bundle_type:
                return ComponentDescriptor(name=parts[index + 1], type=bundle_type)
        return None

    @staticmethod
    def _qualify(path: PurePosixPath, name: str) -> str:
        # objects/<Object>/fields/<Field>.field-meta.xml
        parts = path.parts
        if len(parts) >= 3:
            return f"{parts[-3]}.{name}"
        return name
