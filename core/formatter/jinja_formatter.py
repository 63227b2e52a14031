import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from core.contracts.formatter import Formatter
from core.contracts.models import CONFLICT_STATUSES, ChangeReport
from utils.errors import FormatterError


def collect_conflicts(report: ChangeReport) -> List[Dict[str, Any]]:
    """Flattens a report into one row per change that has conflicting components."""
    rows = []
    for change_id, change in report.all_changes().items():
        components = []
        for package_name, buckets in change.metadata.items():
            for status in CONFLICT_STATUSES:
                for component in buckets.bucket(status):
                    if component.conflicts:
                        components.append({
                            "package": package_name,
                            "status": status,
                            "name": component.name,
                            "type": component.type,
                            "conflicts": component.conflicts,
                        })
        if components:
            rows.append({"id": change_id, "status": change.state, "components": components})
    return rows


class Jinja2Formatter(Formatter):
    def __init__(
        self,
        template_dir: Optional[str] = None,
        template_name: str = "conflicts.md.j2",
    ):
        if template_dir is None:
            # Default template directory relative to this file
            template_dir = str(Path(__file__).parent / "templates")

        self.template_dir = template_dir
        self.template_name = template_name
        try:
            self.env = Environment(
                loader=FileSystemLoader(self.template_dir),
                trim_blocks=True,
                lstrip_blocks=True,
            )
        except Exception as e:
            raise FormatterError(f"Failed to initialize Jinja2 environment: {e}") from e

    def format(self, report: ChangeReport) -> str:
        try:
            template = self.env.get_template(self.template_name)
            return template.render(
                report=report,
                changes=collect_conflicts(report),
                now=datetime.datetime.now,
            )
        except Exception as e:
            raise FormatterError(f"Failed to render template {self.template_name}: {e}") from e
