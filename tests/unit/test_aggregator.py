"""Tests for the run aggregator."""

import json
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

from carwale_e2e.reporting import (
    ConsoleRenderer,
    RunAggregator,
    RunConfig,
    RunStateError,
    TestCaseInfo,
    TestOutcome,
    TestStatus,
)
from carwale_e2e.reporting.json_reporter import LATEST_REPORT_NAME

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)


@pytest.fixture
def lines() -> list[str]:
    """Captured console lines."""
    return []


@pytest.fixture
def aggregator(tmp_path: Path, lines: list[str]) -> RunAggregator:
    """Aggregator writing reports to a temp dir with a fixed clock."""
    return RunAggregator(
        report_dir=tmp_path / "reports",
        renderer=ConsoleRenderer(write=lines.append),
        clock=lambda: FIXED_NOW,
    )


def make_case(title: str = "test_logo", browser: str = "chromium") -> TestCaseInfo:
    return TestCaseInfo(
        title=title,
        title_path=[browser, "tests/e2e/test_home.py", "TestHomePage"],
        browser=browser,
    )


def test_single_passed_test(aggregator: RunAggregator) -> None:
    """A single clean pass gives a 100.0 pass rate and no flaky count."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case(), TestOutcome(status="passed", duration_ms=1200, retry=0))
    aggregator.on_run_end("passed")

    summary = aggregator.summary
    assert summary.total == 1
    assert summary.passed == 1
    assert summary.failed == 0
    assert summary.flaky == 0
    assert summary.pass_rate == "100.0"


def test_passed_after_retries_is_flaky(aggregator: RunAggregator) -> None:
    """A pass on a retry counts as both passed and flaky."""
    aggregator.on_run_begin(RunConfig())
    record = aggregator.on_test_end(make_case(), TestOutcome(status="passed", duration_ms=500, retry=2))

    assert aggregator.summary.passed == 1
    assert aggregator.summary.flaky == 1
    assert record.retries == 2


def test_failed_test_keeps_first_error_line(aggregator: RunAggregator, lines: list[str]) -> None:
    """Only the first line of a failure message is recorded and printed."""
    aggregator.on_run_begin(RunConfig())
    record = aggregator.on_test_end(
        make_case(),
        TestOutcome(
            status="failed",
            duration_ms=30000,
            error="Timeout 30000ms exceeded\nCall log:\n  - waiting for locator('h1')",
        ),
    )

    assert aggregator.summary.failed == 1
    assert record.error == "Timeout 30000ms exceeded"
    assert "   ❌ Error: Timeout 30000ms exceeded" in lines


def test_timed_out_counts_as_failed(aggregator: RunAggregator) -> None:
    """timedOut is counted under failed and keeps its own status."""
    aggregator.on_run_begin(RunConfig())
    record = aggregator.on_test_end(
        make_case(), TestOutcome(status=TestStatus.TIMED_OUT, duration_ms=10, error="Timeout")
    )

    assert aggregator.summary.failed == 1
    assert record.status == "timedOut"
    assert record.error == "Timeout"


def test_passed_test_has_no_error(aggregator: RunAggregator) -> None:
    """Errors are only kept for failed or timed out tests."""
    aggregator.on_run_begin(RunConfig())
    record = aggregator.on_test_end(
        make_case(), TestOutcome(status="passed", duration_ms=10, error="ignored")
    )

    assert record.error is None
    assert "error" not in record.to_dict()


def test_empty_run_has_zero_pass_rate(aggregator: RunAggregator, lines: list[str]) -> None:
    """A run without tests reports a pass rate of 0 without dividing by zero."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_run_end("passed")

    assert aggregator.summary.total == 0
    assert aggregator.summary.pass_rate == "0"
    assert any("📈 Pass Rate: 0%" in line for line in lines)


def test_skipped_test(aggregator: RunAggregator) -> None:
    """Skipped tests are counted and appended."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case(), TestOutcome(status="skipped"))

    assert aggregator.summary.skipped == 1
    assert len(aggregator.summary.tests) == 1


def test_interrupted_status_is_counted_as_other(aggregator: RunAggregator) -> None:
    """Statuses outside passed/failed/timedOut/skipped land in the other counter."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case("a"), TestOutcome(status="passed"))
    aggregator.on_test_end(make_case("b"), TestOutcome(status="interrupted"))

    summary = aggregator.summary
    assert summary.total == 2
    assert summary.passed + summary.failed + summary.skipped == 1
    assert summary.other == 1
    assert summary.total == summary.passed + summary.failed + summary.skipped + summary.other


def test_counters_track_every_test_end(aggregator: RunAggregator) -> None:
    """total and len(tests) grow by one per event; flaky never exceeds passed."""
    statuses = ["passed", "failed", "skipped", "timedOut", "interrupted", "passed"]
    retries = [1, 0, 0, 0, 0, 3]
    aggregator.on_run_begin(RunConfig())

    for n, (status, retry) in enumerate(zip(statuses, retries), start=1):
        aggregator.on_test_end(make_case(f"t{n}"), TestOutcome(status=status, duration_ms=100, retry=retry))
        summary = aggregator.summary
        assert summary.total == n
        assert len(summary.tests) == n
        assert summary.passed + summary.failed + summary.skipped <= summary.total
        assert summary.flaky <= summary.passed

    assert aggregator.summary.duration == 600
    assert aggregator.summary.flaky == 2
    assert [t.title for t in aggregator.summary.tests] == ["t1", "t2", "t3", "t4", "t5", "t6"]


def test_pass_rate_has_one_decimal(aggregator: RunAggregator) -> None:
    """Pass rate is passed / total * 100 with one decimal."""
    aggregator.on_run_begin(RunConfig())
    for status in ("passed", "passed", "failed"):
        aggregator.on_test_end(make_case(), TestOutcome(status=status))

    assert aggregator.summary.pass_rate == "66.7"


def test_full_title_joins_suite_path(aggregator: RunAggregator) -> None:
    """fullTitle is the suite path and title joined with ' > '."""
    aggregator.on_run_begin(RunConfig())
    record = aggregator.on_test_end(make_case(), TestOutcome(status="passed"))

    assert record.full_title == "chromium > tests/e2e/test_home.py > TestHomePage > test_logo"
    assert record.browser == "chromium"


def test_concurrent_test_ends_are_all_counted(aggregator: RunAggregator) -> None:
    """Test-end events from many threads are counted exactly once each."""
    aggregator.on_run_begin(RunConfig())
    browsers = ["chromium", "firefox", "webkit"]
    per_thread = 200
    barrier = threading.Barrier(len(browsers))

    def worker(browser: str) -> None:
        barrier.wait()
        for i in range(per_thread):
            aggregator.on_test_end(make_case(f"t{i}", browser), TestOutcome(status="passed", duration_ms=1))

    threads = [threading.Thread(target=worker, args=(b,)) for b in browsers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    summary = aggregator.summary
    assert summary.total == per_thread * len(browsers)
    assert summary.passed == summary.total
    assert summary.duration == summary.total
    assert len(summary.tests) == summary.total
    for browser in browsers:
        assert sum(1 for t in summary.tests if t.browser == browser) == per_thread


def test_run_begin_banner_uses_placeholder_for_missing_fields(
    aggregator: RunAggregator, lines: list[str]
) -> None:
    """Missing config values render as N/A instead of failing."""
    aggregator.on_run_begin(RunConfig(test_dir="tests/e2e", base_url=None, workers=4))

    text = "\n".join(lines)
    assert "📁 Test Directory: tests/e2e" in text
    assert "🌐 Base URL: N/A" in text
    assert "👥 Workers: 4" in text
    assert "🔄 Retries: N/A" in text
    assert "TEST EXECUTION" in text


def test_run_begin_accepts_foreign_config_objects(aggregator: RunAggregator) -> None:
    """Config objects missing attributes are tolerated."""
    summary = aggregator.on_run_begin(object())

    assert summary.start_time == "2026-03-14T09:26:53.589Z"


def test_test_begin_prints_without_counting(aggregator: RunAggregator, lines: list[str]) -> None:
    """on_test_begin prints a line and leaves counters alone."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_begin(make_case("test_menu", "firefox"))

    assert lines[-1] == "🧪 [firefox] Running: test_menu"
    assert aggregator.summary.total == 0


def test_test_end_prints_status_line(aggregator: RunAggregator, lines: list[str]) -> None:
    """The progress line shows marker, browser, title and seconds."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case("test_menu", "webkit"), TestOutcome(status="passed", duration_ms=1234))

    assert lines[-1] == "✅ [webkit] test_menu (1.23s)"


def test_run_end_lists_failed_tests(aggregator: RunAggregator, lines: list[str]) -> None:
    """The failed-tests section lists every failed or timed out test."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case("ok"), TestOutcome(status="passed"))
    aggregator.on_test_end(make_case("broken"), TestOutcome(status="failed", error="boom"))
    aggregator.on_test_end(make_case("slow"), TestOutcome(status="timedOut"))
    aggregator.on_run_end("failed")

    text = "\n".join(lines)
    assert "FAILED TESTS" in text
    assert "1. chromium > tests/e2e/test_home.py > TestHomePage > broken" in lines
    assert "   Error: boom" in lines
    assert "2. chromium > tests/e2e/test_home.py > TestHomePage > slow" in lines
    assert "🏁 Status:    FAILED" in text


def test_run_end_without_failures_skips_failed_section(
    aggregator: RunAggregator, lines: list[str]
) -> None:
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case(), TestOutcome(status="passed"))
    aggregator.on_run_end("passed")

    assert not any("FAILED TESTS" in line for line in lines)


def test_run_end_persists_both_reports(aggregator: RunAggregator, tmp_path: Path) -> None:
    """The timestamped and latest reports hold identical bytes."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case(), TestOutcome(status="passed", duration_ms=10))
    report_path = aggregator.on_run_end("passed")

    report_dir = tmp_path / "reports"
    assert report_path == report_dir / "carwale-report-2026-03-14T09-26-53-589Z.json"
    assert report_path.read_bytes() == (report_dir / LATEST_REPORT_NAME).read_bytes()


def test_latest_report_matches_summary(aggregator: RunAggregator, tmp_path: Path) -> None:
    """Reading back latest-report.json yields the in-memory summary."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case("a"), TestOutcome(status="passed", duration_ms=10, retry=1))
    aggregator.on_test_end(make_case("b"), TestOutcome(status="failed", duration_ms=20, error="x\ny"))
    aggregator.on_run_end("failed")

    document = json.loads((tmp_path / "reports" / LATEST_REPORT_NAME).read_text(encoding="utf-8"))

    assert document == aggregator.summary.to_dict()
    assert document["projectName"] == "CarWale Automation"
    assert document["tests"][1]["error"] == "x"
    assert document["startTime"] == "2026-03-14T09:26:53.589Z"
    assert document["endTime"] == "2026-03-14T09:26:53.589Z"


def test_existing_report_dir_is_reused(aggregator: RunAggregator, tmp_path: Path) -> None:
    """An already existing report directory is not an error."""
    (tmp_path / "reports").mkdir()
    aggregator.on_run_begin(RunConfig())
    aggregator.on_run_end("passed")

    assert (tmp_path / "reports" / LATEST_REPORT_NAME).exists()


def test_write_failure_propagates(tmp_path: Path, lines: list[str]) -> None:
    """A report that cannot be written raises after the summary was printed."""
    blocker = tmp_path / "reports"
    blocker.write_text("not a directory")
    aggregator = RunAggregator(
        report_dir=blocker,
        renderer=ConsoleRenderer(write=lines.append),
        clock=lambda: FIXED_NOW,
    )
    aggregator.on_run_begin(RunConfig())

    with pytest.raises(OSError):
        aggregator.on_run_end("passed")

    assert any("TEST SUMMARY" in line for line in lines)


def test_test_end_before_run_begin_raises(aggregator: RunAggregator) -> None:
    with pytest.raises(RunStateError):
        aggregator.on_test_end(make_case(), TestOutcome(status="passed"))


def test_no_updates_after_run_end(aggregator: RunAggregator) -> None:
    """A finalized summary rejects further events."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_run_end("passed")

    with pytest.raises(RunStateError):
        aggregator.on_test_end(make_case(), TestOutcome(status="passed"))
    with pytest.raises(RunStateError):
        aggregator.on_run_end("passed")


def test_persist_before_run_end_raises(aggregator: RunAggregator) -> None:
    aggregator.on_run_begin(RunConfig())

    with pytest.raises(RunStateError):
        aggregator.persist()


def test_new_run_starts_from_zero(aggregator: RunAggregator) -> None:
    """Each run begin creates a fresh summary."""
    aggregator.on_run_begin(RunConfig())
    aggregator.on_test_end(make_case(), TestOutcome(status="passed"))
    aggregator.on_run_end("passed")

    summary = aggregator.on_run_begin(RunConfig())

    assert summary.total == 0
    assert summary.tests == []
