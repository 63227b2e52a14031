from typing import Dict, Mapping, Set, Tuple

from core.colors import ColorAllocator
from core.contracts.models import CONFLICT_STATUSES, Change, ConflictRef
from utils.logger import logger

Identity = Tuple[str, str]


def _touched_components(change: Change) -> Dict[str, Set[Identity]]:
    """Package -> (name, type) of every added or modified component in a change."""
    touched: Dict[str, Set[Identity]] = {}
    for package_name, buckets in change.metadata.items():
        identities = touched.setdefault(package_name, set())
        for status in CONFLICT_STATUSES:
            identities.update(c.identity for c in buckets.bucket(status))
    return touched


class ConflictDetector:
    """
    Annotates every added/modified component with the other changes that
    add or modify the same `(name, type)` in the same package.

    Each ordered pair of distinct changes is visited, so a shared component
    is recorded on both sides independently. Deleted components are never
    compared. Colors come from the injected allocator, requested in scan
    order, which keeps assignments stable for a given input.
    """

    def __init__(self, allocator: ColorAllocator):
        self.allocator = allocator

    def detect(self, changes: Mapping[str, Change]) -> None:
        """Fills the `conflicts` lists of `changes` in place."""
        for change in changes.values():
            for buckets in change.metadata.values():
                for status in CONFLICT_STATUSES:
                    for component in buckets.bucket(status):
                        component.conflicts.clear()

        lookup = {change_id: _touched_components(change) for change_id, change in changes.items()}

        found = 0
        for current_id, current in changes.items():
            for other_id in changes:
                if other_id == current_id:
                    continue
                found += self._compare(current, other_id, lookup[other_id])

        logger.info(f"Recorded {found} conflict references across {len(changes)} changes")

    def _compare(self, current: Change, other_id: str, other_touched: Dict[str, Set[Identity]]) -> int:
        found = 0
        for package_name, buckets in current.metadata.items():
            other_identities = other_touched.get(package_name)
            if not other_identities:
                continue
            for status in CONFLICT_STATUSES:
                for component in buckets.bucket(status):
                    if component.identity not in other_identities:
                        continue
                    color = self.allocator.color_for(component.type, component.name)
                    component.conflicts.append(ConflictRef(change_id=other_id, color=color))
                    found += 1
        return found
