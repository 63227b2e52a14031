import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from core.contracts.models import ChangeReport
from utils.errors import ReportError
from utils.logger import logger


def load_report(path: Union[str, Path]) -> ChangeReport:
    """
    Reads an `{openPrs, closedPrs}` change report.

    Raises:
        ReportError: If the file cannot be read, parsed or validated.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ReportError(f"Could not read change report {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ReportError(f"Change report {path} is not valid JSON: {e}") from e

    try:
        report = ChangeReport.model_validate(data)
    except ValidationError as e:
        raise ReportError(f"Change report {path} has an unexpected shape: {e}") from e

    logger.info(f"Loaded {len(report.open_prs)} open and {len(report.closed_prs)} closed PRs from {path}")
    return report


def dump_report(report: ChangeReport) -> str:
    """Serializes a report as pretty-printed JSON using the dashboard's key names."""
    return json.dumps(report.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def save_report(report: ChangeReport, path: Union[str, Path]) -> None:
    """
    Writes the report, creating parent directories as needed.

    Raises:
        ReportError: If the file cannot be written.
    """
    path = Path(path)
    try:
        content = dump_report(report)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except (OSError, TypeError, ValueError) as e:
        raise ReportError(f"Could not write change report to {path}: {e}") from e
    logger.success(f"Enhanced PR details written to {path}")
