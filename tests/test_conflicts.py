import pytest

from core.colors import ColorAllocator
from core.conflicts import ConflictDetector
from core.contracts.models import Change, Component, PackageBuckets

PALETTE = ["red", "green", "blue", "yellow"]


def make_change(**packages):
    """make_change(core={"modified": [("Foo", "ApexClass")]})"""
    metadata = {}
    for package_name, buckets in packages.items():
        metadata[package_name] = PackageBuckets(**{
            bucket: [Component(name=name, type=type_) for name, type_ in components]
            for bucket, components in buckets.items()
        })
    return Change(metadata=metadata)


def refs(change, package_name, status, name):
    bucket = change.metadata[package_name].bucket(status)
    component = next(c for c in bucket if c.name == name)
    return [(r.change_id, r.color) for r in component.conflicts]


@pytest.fixture
def detector():
    return ConflictDetector(ColorAllocator(PALETTE))


def test_shared_modified_component_is_recorded_on_both_sides(detector):
    changes = {
        "1": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "2": make_change(core={"modified": [("Foo", "ApexClass")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "modified", "Foo") == [("2", "red")]
    assert refs(changes["2"], "core", "modified", "Foo") == [("1", "red")]


def test_added_conflicts_with_modified(detector):
    changes = {
        "1": make_change(core={"added": [("Foo", "ApexClass")]}),
        "2": make_change(core={"modified": [("Foo", "ApexClass")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "added", "Foo") == [("2", "red")]
    assert refs(changes["2"], "core", "modified", "Foo") == [("1", "red")]


def test_deleted_components_never_conflict(detector):
    changes = {
        "3": make_change(core={"deleted": [("Bar", "ApexClass")]}),
        "4": make_change(core={"modified": [("Bar", "ApexClass")]}),
    }

    detector.detect(changes)

    assert changes["3"].metadata["core"].deleted[0].conflicts == []
    assert refs(changes["4"], "core", "modified", "Bar") == []
    assert len(detector.allocator) == 0


def test_same_component_in_different_packages_does_not_conflict(detector):
    changes = {
        "1": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "2": make_change(sales={"modified": [("Foo", "ApexClass")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "modified", "Foo") == []
    assert refs(changes["2"], "sales", "modified", "Foo") == []


def test_type_must_match(detector):
    changes = {
        "1": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "2": make_change(core={"modified": [("Foo", "ApexTrigger")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "modified", "Foo") == []


def test_no_self_conflict(detector):
    changes = {
        "1": make_change(core={"added": [("Foo", "ApexClass")], "modified": [("Foo", "ApexClass")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "added", "Foo") == []
    assert refs(changes["1"], "core", "modified", "Foo") == []


def test_one_reference_per_other_change(detector):
    changes = {
        "1": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "2": make_change(core={"added": [("Foo", "ApexClass")], "modified": [("Foo", "ApexClass")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "modified", "Foo") == [("2", "red")]
    assert refs(changes["2"], "core", "added", "Foo") == [("1", "red")]
    assert refs(changes["2"], "core", "modified", "Foo") == [("1", "red")]


def test_colors_are_stable_per_component(detector):
    changes = {
        "A": make_change(core={"modified": [("X", "ApexClass"), ("Y", "Flow")]}),
        "B": make_change(core={"modified": [("X", "ApexClass")]}),
        "C": make_change(core={"modified": [("Y", "Flow")]}),
    }

    detector.detect(changes)

    assert refs(changes["A"], "core", "modified", "X") == [("B", "red")]
    assert refs(changes["A"], "core", "modified", "Y") == [("C", "green")]
    assert refs(changes["B"], "core", "modified", "X") == [("A", "red")]
    assert refs(changes["C"], "core", "modified", "Y") == [("A", "green")]


def test_three_way_conflict_lists_follow_input_order(detector):
    changes = {
        "1": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "2": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "3": make_change(core={"modified": [("Foo", "ApexClass")]}),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "modified", "Foo") == [("2", "red"), ("3", "red")]
    assert refs(changes["2"], "core", "modified", "Foo") == [("1", "red"), ("3", "red")]
    assert refs(changes["3"], "core", "modified", "Foo") == [("1", "red"), ("2", "red")]


def test_rerunning_is_deterministic():
    def build():
        return {
            "1": make_change(core={"modified": [("X", "ApexClass"), ("Y", "Flow")]}),
            "2": make_change(core={"added": [("Y", "Flow")], "modified": [("X", "ApexClass")]}),
            "3": make_change(core={"modified": [("Y", "Flow")]}),
        }

    first, second = build(), build()
    ConflictDetector(ColorAllocator(PALETTE)).detect(first)
    ConflictDetector(ColorAllocator(PALETTE)).detect(second)
    assert {k: v.model_dump() for k, v in first.items()} == {k: v.model_dump() for k, v in second.items()}

    # Detecting again on annotated changes does not duplicate references.
    detector = ConflictDetector(ColorAllocator(PALETTE))
    detector.detect(first)
    detector.detect(first)
    assert {k: v.model_dump() for k, v in first.items()} == {k: v.model_dump() for k, v in second.items()}


def test_changes_without_metadata_are_skipped(detector):
    changes = {
        "1": make_change(core={"modified": [("Foo", "ApexClass")]}),
        "2": Change(),
    }

    detector.detect(changes)

    assert refs(changes["1"], "core", "modified", "Foo") == []
