"""Run summary data model for the CarWale run report.

Defines the dataclasses that are accumulated during a run and written
to the JSON report at the end of it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

PROJECT_NAME = "CarWale Automation"


class TestStatus(str, Enum):
    """Final status of a single test attempt."""
    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timedOut"
    SKIPPED = "skipped"
    INTERRUPTED = "interrupted"


FAILURE_STATUSES = {TestStatus.FAILED.value, TestStatus.TIMED_OUT.value}


def first_line(message: Optional[str]) -> Optional[str]:
    """Return the first line of a possibly multi-line message."""
    if message is None:
        return None
    lines = str(message).splitlines()
    return lines[0].rstrip() if lines else ""


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a moment as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class TestRecord:
    """One completed test attempt."""
    __test__ = False

    title: str
    full_title: str
    status: str
    duration: int
    retries: int = 0
    browser: str = "default"
    error: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.status in FAILURE_STATUSES

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "fullTitle": self.full_title,
            "status": self.status,
            "duration": self.duration,
            "retries": self.retries,
            "browser": self.browser,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TestRecord":
        return cls(
            title=data["title"],
            full_title=data.get("fullTitle", data["title"]),
            status=data["status"],
            duration=data.get("duration", 0),
            retries=data.get("retries", 0),
            browser=data.get("browser", "default"),
            error=data.get("error"),
        )


@dataclass
class RunSummary:
    """Aggregated results of one test run.

    Counters only ever grow. ``other`` counts statuses outside
    passed/failed/timedOut/skipped (e.g. interrupted) so that
    ``total == passed + failed + skipped + other`` always holds.
    """
    project_name: str = PROJECT_NAME
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    flaky: int = 0
    other: int = 0
    duration: int = 0
    start_time: str = ""
    end_time: str = ""
    tests: list[TestRecord] = field(default_factory=list)
    finalized: bool = False

    @property
    def pass_rate(self) -> str:
        """Percentage of passed tests, one decimal, ``"0"`` for an empty run."""
        if self.total == 0:
            return "0"
        return f"{self.passed / self.total * 100:.1f}"

    @property
    def duration_seconds(self) -> str:
        return f"{self.duration / 1000:.2f}"

    @property
    def failed_tests(self) -> list[TestRecord]:
        return [t for t in self.tests if t.is_failure]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase report document."""
        return {
            "projectName": self.project_name,
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "flaky": self.flaky,
            "other": self.other,
            "duration": self.duration,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "tests": [t.to_dict() for t in self.tests],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunSummary":
        """Rebuild a summary from a saved report document."""
        if not isinstance(data, dict):
            raise ValueError(f"Report must be a JSON object, got {type(data).__name__}")
        return cls(
            project_name=data.get("projectName", PROJECT_NAME),
            total=data.get("total", 0),
            passed=data.get("passed", 0),
            failed=data.get("failed", 0),
            skipped=data.get("skipped", 0),
            flaky=data.get("flaky", 0),
            other=data.get("other", 0),
            duration=data.get("duration", 0),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            tests=[TestRecord.from_dict(t) for t in data.get("tests", [])],
            finalized=True,
        )
