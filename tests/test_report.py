import json

import pytest

from core.contracts.models import Component, ConflictRef, PackageBuckets
from core.report import dump_report, load_report, save_report
from utils.errors import ReportError

SAMPLE = {
    "openPrs": {
        "12": {
            "issueTitle": "Add invoice flow",
            "author": "octocat",
            "labels": [{"key": "feature", "description": None}],
            "files": {"added": ["src/core/classes/Foo.cls"], "modified": [], "deleted": []},
        }
    },
    "closedPrs": {
        "9": {"issueTitle": "Old", "merged": True, "files": None},
    },
}


@pytest.fixture
def report_file(tmp_path):
    path = tmp_path / "prDetails.json"
    path.write_text(json.dumps(SAMPLE), encoding="utf-8")
    return path


def test_load_report_marks_status(report_file):
    report = load_report(report_file)

    assert report.open_prs["12"].state == "open"
    assert report.closed_prs["9"].state == "closed"
    assert report.open_prs["12"].files.added == ["src/core/classes/Foo.cls"]
    assert report.closed_prs["9"].files is None


def test_round_trip_preserves_unknown_fields(report_file, tmp_path):
    report = load_report(report_file)
    report.open_prs["12"].metadata = {
        "core": PackageBuckets(added=[
            Component(name="Foo", type="ApexClass", conflicts=[ConflictRef(change_id="9", color="#e6194B")])
        ])
    }
    output = tmp_path / "out" / "prDetails.json"

    save_report(report, output)
    data = json.loads(output.read_text(encoding="utf-8"))

    pr = data["openPrs"]["12"]
    assert pr["issueTitle"] == "Add invoice flow"
    assert pr["labels"] == [{"key": "feature", "description": None}]
    assert "status" not in pr
    assert pr["metadata"]["core"] == {
        "added": [{"name": "Foo", "type": "ApexClass", "conflicts": [{"prNumber": "9", "color": "#e6194B"}]}],
        "modified": [],
        "deleted": [],
    }
    assert data["closedPrs"]["9"]["merged"] is True


def test_input_status_field_is_kept_as_data(tmp_path):
    path = tmp_path / "prDetails.json"
    path.write_text(json.dumps({
        "openPrs": {"1": {"status": "draft", "files": {"modified": []}}},
        "closedPrs": {"2": {"status": "open"}},
    }), encoding="utf-8")

    report = load_report(path)
    assert report.open_prs["1"].state == "open"
    assert report.closed_prs["2"].state == "closed"

    output = tmp_path / "out.json"
    save_report(report, output)
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["openPrs"]["1"]["status"] == "draft"
    assert data["closedPrs"]["2"]["status"] == "open"


def test_dump_report_is_pretty_printed(report_file):
    assert '\n  "openPrs": {' in dump_report(load_report(report_file))


def test_numeric_conflict_ids_become_strings():
    ref = ConflictRef.model_validate({"prNumber": 7, "color": "#000000"})
    assert ref.change_id == "7"


def test_load_missing_report(tmp_path):
    with pytest.raises(ReportError, match="Could not read"):
        load_report(tmp_path / "nope.json")


def test_load_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ReportError, match="not valid JSON"):
        load_report(path)


def test_load_wrong_shape(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"openPrs": {"1": {"files": {"added": "oops"}}}}), encoding="utf-8")
    with pytest.raises(ReportError, match="unexpected shape"):
        load_report(path)


def test_save_failure_is_report_error(report_file, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(ReportError):
        save_report(load_report(report_file), blocker / "out.json")
