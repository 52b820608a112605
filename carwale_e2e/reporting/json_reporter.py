"""JSON report writer for CarWale test runs.

Writes the run summary to a timestamped report and to a fixed
``latest-report.json`` pointer, and converts summaries to the CLI's
JSON output envelope.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .summary import RunSummary

logger = logging.getLogger(__name__)

REPORT_PREFIX = "carwale-report-"
LATEST_REPORT_NAME = "latest-report.json"


def timestamp_slug(timestamp: str) -> str:
    """Make an ISO timestamp safe for use in a file name."""
    return timestamp.replace(":", "-").replace(".", "-")


class JsonReporter:
    """Serializes run summaries to JSON files."""

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        """Convert report to JSON string.

        Args:
            report: Report dictionary.
            pretty: If True, format with indentation.

        Returns:
            JSON string.
        """
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def report_path(self, summary: RunSummary, report_dir: Union[str, Path]) -> Path:
        """Path of the permanent, timestamped report for a run."""
        return Path(report_dir) / f"{REPORT_PREFIX}{timestamp_slug(summary.end_time)}.json"

    def save_run(
        self,
        summary: RunSummary,
        report_dir: Union[str, Path],
    ) -> tuple[Path, Path]:
        """Save a run summary to its timestamped file and to the latest file.

        Both files receive the same bytes. Write errors are not caught.

        Args:
            summary: Finished run summary.
            report_dir: Directory for reports, created if missing.

        Returns:
            (timestamped report path, latest report path).
        """
        report_dir = Path(report_dir)
        report_dir.mkdir(parents=True, exist_ok=True)

        payload = self.to_json_string(summary.to_dict()).encode("utf-8")

        report_path = self.report_path(summary, report_dir)
        latest_path = report_dir / LATEST_REPORT_NAME

        report_path.write_bytes(payload)
        latest_path.write_bytes(payload)

        logger.debug("Wrote %d bytes to %s and %s", len(payload), report_path, latest_path)
        return report_path, latest_path

    def load(self, path: Union[str, Path]) -> RunSummary:
        """Load a saved report.

        Raises:
            FileNotFoundError: If the report does not exist.
            ValueError: If the file is not a valid report.
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e
        return RunSummary.from_dict(data)

    def load_latest(self, report_dir: Union[str, Path]) -> RunSummary:
        return self.load(Path(report_dir) / LATEST_REPORT_NAME)

    def generate_flow_output(
        self,
        summary: RunSummary,
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate CLI compatible JSON output.

        Follows the JSON output standard:
        {
            "success": bool,
            "command": "report",
            "data": { ... },
            "message": str
        }

        Args:
            summary: Run summary.
            report_path: Path of the report the summary was read from.

        Returns:
            CLI JSON output.
        """
        all_passed = summary.failed == 0 and summary.other == 0

        data: dict[str, Any] = {
            "project": summary.project_name,
            "total_tests": summary.total,
            "passed": summary.passed,
            "failed": summary.failed,
            "skipped": summary.skipped,
            "flaky": summary.flaky,
            "other": summary.other,
            "pass_rate": summary.pass_rate,
            "duration_ms": summary.duration,
            "started_at": summary.start_time,
            "finished_at": summary.end_time,
        }

        if report_path:
            data["report_path"] = report_path

        if summary.total == 0:
            message = "No tests were run"
        elif summary.failed:
            message = f"{summary.failed} of {summary.total} tests failed"
        elif summary.other:
            message = f"{summary.other} of {summary.total} tests did not finish"
        else:
            message = "All tests passed"

        return {
            "success": all_passed,
            "command": "report",
            "data": data,
            "message": message,
        }
