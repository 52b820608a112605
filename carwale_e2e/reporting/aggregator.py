"""Run aggregator - turns test lifecycle events into a run summary.

The test engine calls the four lifecycle methods:
1. on_run_begin   - once, before any test
2. on_test_begin  - when a test attempt starts
3. on_test_end    - when a test attempt finishes (possibly concurrently)
4. on_run_end     - once, after every test has ended; saves the report
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .console import ConsoleRenderer
from .json_reporter import JsonReporter
from .summary import PROJECT_NAME, RunSummary, TestRecord, TestStatus, first_line, iso_timestamp

logger = logging.getLogger(__name__)


class RunStateError(RuntimeError):
    """Raised when lifecycle events arrive out of order."""


@dataclass
class RunConfig:
    """Global configuration reported at run begin. Any field may be missing."""
    test_dir: Optional[Any] = None
    base_url: Optional[Any] = None
    workers: Optional[Any] = None
    retries: Optional[Any] = None
    projects: list[str] = field(default_factory=list)


@dataclass
class TestCaseInfo:
    """Identity of a test case as seen by the reporter."""
    __test__ = False

    title: str
    title_path: list[str] = field(default_factory=list)
    browser: str = "default"

    @property
    def full_title(self) -> str:
        return " > ".join([*self.title_path, self.title])


@dataclass
class TestOutcome:
    """Result of one test attempt."""
    __test__ = False

    status: str
    duration_ms: int = 0
    retry: int = 0
    error: Optional[str] = None


class RunAggregator:
    """Accumulates one run's results and reports them.

    A summary lives from ``on_run_begin`` until ``on_run_end`` has saved
    it. All summary mutations happen under a single lock, so
    ``on_test_end`` may be called from several threads at once.
    """

    def __init__(
        self,
        project_name: str = PROJECT_NAME,
        report_dir: Union[str, Path] = "reports",
        renderer: Optional[ConsoleRenderer] = None,
        reporter: Optional[JsonReporter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize run aggregator.

        Args:
            project_name: Label stored in the report.
            report_dir: Directory where reports are written.
            renderer: Console renderer (default prints to stdout).
            reporter: JSON report writer.
            clock: Returns the current time; used for start/end timestamps.
        """
        self.project_name = project_name
        self.report_dir = Path(report_dir)
        self.renderer = renderer or ConsoleRenderer()
        self.reporter = reporter or JsonReporter()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._summary: Optional[RunSummary] = None

    @property
    def summary(self) -> Optional[RunSummary]:
        return self._summary

    def on_run_begin(self, config: Optional[RunConfig] = None) -> RunSummary:
        """Start a new run and print the banner."""
        config = config or RunConfig()
        with self._lock:
            self._summary = RunSummary(
                project_name=self.project_name,
                start_time=iso_timestamp(self._clock()),
            )
            self.renderer.run_begin(
                test_dir=getattr(config, "test_dir", None),
                base_url=getattr(config, "base_url", None),
                workers=getattr(config, "workers", None),
                retries=getattr(config, "retries", None),
            )
            return self._summary

    def on_test_begin(self, test: TestCaseInfo) -> None:
        with self._lock:
            self.renderer.test_begin(test.browser, test.title)

    def on_test_end(self, test: TestCaseInfo, outcome: TestOutcome) -> TestRecord:
        """Record a finished test attempt.

        Returns:
            The record appended to the summary.
        """
        with self._lock:
            summary = self._active_summary()
            status = str(getattr(outcome.status, "value", outcome.status))
            duration = int(outcome.duration_ms or 0)
            retries = int(outcome.retry or 0)

            summary.total += 1
            summary.duration += duration

            error = None
            if status == TestStatus.PASSED.value:
                summary.passed += 1
                if retries > 0:
                    summary.flaky += 1
            elif status in (TestStatus.FAILED.value, TestStatus.TIMED_OUT.value):
                summary.failed += 1
                if outcome.error:
                    error = first_line(outcome.error)
            elif status == TestStatus.SKIPPED.value:
                summary.skipped += 1
            else:
                summary.other += 1
                logger.warning("Test %r ended with status %r", test.full_title, status)

            record = TestRecord(
                title=test.title,
                full_title=test.full_title,
                status=status,
                duration=duration,
                retries=retries,
                browser=test.browser,
                error=error,
            )
            summary.tests.append(record)
            self.renderer.test_end(record)
            return record

    def on_run_end(self, status: str) -> Path:
        """Finish the run, print the summary and save the report.

        Args:
            status: Overall run status from the test engine.

        Returns:
            Path of the timestamped report.

        Raises:
            OSError: If the report cannot be written.
        """
        with self._lock:
            summary = self._active_summary()
            summary.end_time = iso_timestamp(self._clock())
            summary.finalized = True
            self.renderer.run_end(summary, status)

        report_path, _ = self.persist()
        return report_path

    def persist(self) -> tuple[Path, Path]:
        """Write the finished summary to the report directory."""
        summary = self._summary
        if summary is None or not summary.finalized:
            raise RunStateError("Cannot save a report before the run has ended")

        report_path, latest_path = self.reporter.save_run(summary, self.report_dir)
        logger.info("Run report saved to %s", report_path)
        self.renderer.report_saved(report_path, latest_path)
        return report_path, latest_path

    def _active_summary(self) -> RunSummary:
        if self._summary is None:
            raise RunStateError("Run has not begun; call on_run_begin first")
        if self._summary.finalized:
            raise RunStateError("Run has already ended")
        return self._summary
