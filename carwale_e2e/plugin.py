"""pytest plugin that feeds the run aggregator from pytest's hooks.

Enabled with ``--carwale-report``. Under pytest-xdist the controller
owns the aggregator; workers only annotate their reports with the
failure message and whether it was a Playwright timeout.

Hook mapping:
    pytest_sessionstart      -> RunAggregator.on_run_begin
    pytest_runtest_logstart  -> RunAggregator.on_test_begin
    pytest_runtest_logreport -> RunAggregator.on_test_end (per attempt)
    pytest_sessionfinish     -> RunAggregator.on_run_end
"""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .reporting import ConsoleRenderer, RunAggregator, RunConfig, TestCaseInfo, TestOutcome
from .reporting.summary import FAILURE_STATUSES, TestStatus
from .settings import VALID_BROWSERS, SuiteSettings, load_settings

logger = logging.getLogger(__name__)

PLUGIN_NAME = "carwale-reporter"
DEFAULT_LABEL = "default"

_NAME_RE = re.compile(r"^(?P<base>[^\[]*)(?:\[(?P<params>.*)\])?$")


def pytest_addoption(parser):
    group = parser.getgroup("carwale", "CarWale run report")
    group.addoption(
        "--carwale-report",
        action="store_true",
        dest="carwale_report",
        default=False,
        help="Print the CarWale run summary and save JSON run reports.",
    )
    group.addoption(
        "--carwale-report-dir",
        dest="carwale_report_dir",
        default=None,
        help="Directory for JSON run reports (default: report_dir setting).",
    )
    group.addoption(
        "--carwale-config",
        dest="carwale_config",
        default=None,
        help="YAML settings file (default: carwale.yaml if present).",
    )


def pytest_configure(config):
    if not config.getoption("carwale_report"):
        return
    if hasattr(config, "workerinput"):
        return

    settings = load_settings(config.getoption("carwale_config"))
    report_dir = config.getoption("carwale_report_dir") or settings.report_dir
    config.pluginmanager.register(CarWaleReportPlugin(config, settings, report_dir), PLUGIN_NAME)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if call.excinfo is None or not report.failed:
        return
    if not item.config.getoption("carwale_report"):
        return
    report.carwale_error = exception_message(call.excinfo)
    report.carwale_timed_out = bool(call.excinfo.errisinstance(PlaywrightTimeoutError))


def exception_message(excinfo) -> str:
    """Message of a captured exception, falling back to its type name."""
    message = str(excinfo.value).strip()
    return message or excinfo.typename


def crash_message(report) -> Optional[str]:
    """Failure message recorded in a report's longrepr."""
    longrepr = report.longrepr
    if longrepr is None:
        return None
    reprcrash = getattr(longrepr, "reprcrash", None)
    if reprcrash is not None:
        return reprcrash.message
    return str(longrepr)


def describe_nodeid(nodeid: str, browsers: Iterable[str] = VALID_BROWSERS) -> TestCaseInfo:
    """Build a TestCaseInfo from a pytest node id.

    ``tests/e2e/test_home.py::TestHomePage::test_logo[chromium]`` becomes
    title ``test_logo`` on browser ``chromium`` with title path
    ``["chromium", "tests/e2e/test_home.py", "TestHomePage"]``.
    """
    browsers = set(browsers)
    parts = nodeid.split("::")
    path, names = parts[0], parts[1:] or [parts[0]]

    match = _NAME_RE.match(names[-1])
    base = match.group("base") if match else names[-1]
    params = match.group("params") if match else None

    browser = DEFAULT_LABEL
    title = names[-1]
    if params is not None:
        ids = params.split("-")
        found = next((i for i in ids if i in browsers), None)
        if found is not None:
            browser = found
            remaining = list(ids)
            remaining.remove(found)
            title = f"{base}[{'-'.join(remaining)}]" if remaining else base

    title_path = [browser]
    if len(parts) > 1:
        title_path.append(path)
    title_path.extend(names[:-1])
    return TestCaseInfo(title=title, title_path=title_path, browser=browser)


def run_status(exitstatus: Any) -> str:
    """Map a pytest exit status to the overall run status."""
    code = int(exitstatus)
    if code in (pytest.ExitCode.OK, pytest.ExitCode.NO_TESTS_COLLECTED):
        return "passed"
    if code == pytest.ExitCode.INTERRUPTED:
        return "interrupted"
    return "failed"


def build_run_config(config, settings: SuiteSettings) -> RunConfig:
    """Collect the run-begin banner values from pytest options and settings."""
    option = config.option
    numprocesses = getattr(option, "numprocesses", None)
    reruns = getattr(option, "reruns", None)
    return RunConfig(
        test_dir=config.args[0] if config.args else str(config.rootpath),
        base_url=getattr(option, "base_url", None) or settings.base_url,
        workers=numprocesses if numprocesses else 1,
        retries=reruns if reruns is not None else settings.retries,
        projects=list(getattr(option, "browser", None) or settings.browsers),
    )


@dataclass
class _Attempt:
    """setup/call/teardown reports of one attempt, folded together."""
    retry: int = 0
    status: str = TestStatus.PASSED.value
    duration_ms: float = 0.0
    error: Optional[str] = None

    def absorb(self, report) -> None:
        self.duration_ms += (report.duration or 0) * 1000
        if report.failed or report.outcome == "rerun":
            if self.status not in FAILURE_STATUSES:
                timed_out = getattr(report, "carwale_timed_out", False)
                self.status = TestStatus.TIMED_OUT.value if timed_out else TestStatus.FAILED.value
                self.error = getattr(report, "carwale_error", None) or crash_message(report)
        elif report.skipped and self.status == TestStatus.PASSED.value:
            self.status = TestStatus.SKIPPED.value


class CarWaleReportPlugin:
    """Translates pytest reports into aggregator lifecycle events."""

    def __init__(self, config, settings: SuiteSettings, report_dir):
        self.config = config
        self.settings = settings
        self.browsers = set(VALID_BROWSERS) | set(settings.browsers)
        self.aggregator = RunAggregator(
            report_dir=report_dir,
            renderer=ConsoleRenderer(write=self._write),
        )
        self._lock = threading.Lock()
        self._attempts: dict[str, _Attempt] = {}
        self._reruns: dict[str, int] = {}

    def _write(self, line: str) -> None:
        terminal = self.config.pluginmanager.get_plugin("terminalreporter")
        if terminal is None:
            print(line)
        else:
            terminal.write_line(line)

    @pytest.hookimpl(trylast=True)
    def pytest_sessionstart(self, session):
        self.aggregator.on_run_begin(build_run_config(self.config, self.settings))

    def pytest_runtest_logstart(self, nodeid, location):
        with self._lock:
            self._attempts.setdefault(nodeid, _Attempt(retry=self._reruns.get(nodeid, 0)))
        self.aggregator.on_test_begin(describe_nodeid(nodeid, self.browsers))

    def pytest_runtest_logreport(self, report):
        nodeid = report.nodeid
        with self._lock:
            # self._reruns[nodeid] counts the attempts already closed by a rerun report
            closed = self._reruns.get(nodeid, 0)
            retry = getattr(report, "rerun", None)
            if retry is None:
                retry = closed
            elif retry < closed:
                # newer pytest-rerunfailures releases still log the teardown of a rerun attempt
                logger.debug("Ignoring %s report of closed attempt %s of %s", report.when, retry, nodeid)
                return

            attempt = self._attempts.setdefault(nodeid, _Attempt(retry=retry))
            attempt.retry = retry
            attempt.absorb(report)

            is_rerun = report.outcome == "rerun"
            if not is_rerun and report.when != "teardown":
                return

            del self._attempts[nodeid]
            if is_rerun:
                self._reruns[nodeid] = retry + 1
            else:
                self._reruns.pop(nodeid, None)

        self._end_attempt(nodeid, attempt, attempt.status)

    def _end_attempt(self, nodeid: str, attempt: _Attempt, status: str) -> None:
        self.aggregator.on_test_end(
            describe_nodeid(nodeid, self.browsers),
            TestOutcome(
                status=status,
                duration_ms=round(attempt.duration_ms),
                retry=attempt.retry,
                error=attempt.error,
            ),
        )

    @pytest.hookimpl(trylast=True)
    def pytest_sessionfinish(self, session, exitstatus):
        with self._lock:
            pending = list(self._attempts.items())
            self._attempts.clear()

        for nodeid, attempt in pending:
            logger.info("Test %s did not finish", nodeid)
            self._end_attempt(nodeid, attempt, TestStatus.INTERRUPTED.value)

        self.aggregator.on_run_end(run_status(exitstatus))
