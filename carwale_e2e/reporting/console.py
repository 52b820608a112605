"""Console rendering for the CarWale run report.

Produces the boxed banners and per-test progress lines. All output goes
through a single ``write`` callable so it can be routed to pytest's
terminal writer or captured in tests.
"""

from typing import Any, Callable, Optional

from .summary import RunSummary, TestRecord

BOX_WIDTH = 62
PLACEHOLDER = "N/A"

STATUS_MARKERS = {
    "passed": "✅",
    "failed": "❌",
    "timedOut": "⏰",
    "skipped": "⏭️",
    "interrupted": "🛑",
}
UNKNOWN_MARKER = "❓"

RULE = "─" * 65


def status_marker(status: str) -> str:
    """Return the emoji marker for a test status."""
    return STATUS_MARKERS.get(status, UNKNOWN_MARKER)


def display_value(value: Any) -> str:
    """Render a config value, using a placeholder for missing ones."""
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or PLACEHOLDER
    return str(value)


class ConsoleRenderer:
    """Renders run progress and summaries as console lines."""

    def __init__(self, write: Optional[Callable[[str], None]] = None):
        """Initialize renderer.

        Args:
            write: Line writer. Defaults to ``print``.
        """
        self.write = write or print

    def _box_top(self) -> None:
        self.write("╔" + "═" * BOX_WIDTH + "╗")

    def _box_divider(self) -> None:
        self.write("╠" + "═" * BOX_WIDTH + "╣")

    def _box_bottom(self) -> None:
        self.write("╚" + "═" * BOX_WIDTH + "╝")

    def _box_line(self, text: str = "") -> None:
        self.write("║" + text.ljust(BOX_WIDTH) + "║")

    def _field(self, label: str, value: str) -> None:
        self._box_line(f"   {label}{value}")

    def _section(self, title: str) -> None:
        self.write(RULE)
        self.write(title.center(len(RULE)).rstrip())
        self.write(RULE)
        self.write("")

    def run_begin(
        self,
        test_dir: Any,
        base_url: Any,
        workers: Any,
        retries: Any,
    ) -> None:
        """Print the run-begin banner."""
        self.write("")
        self._box_top()
        self._box_line()
        self._box_line("   🚗  CARWALE PLAYWRIGHT TEST AUTOMATION")
        self._box_line()
        self._box_divider()
        self._box_line()
        self._field("📁 Test Directory: ", display_value(test_dir))
        self._field("🌐 Base URL: ", display_value(base_url))
        self._field("👥 Workers: ", display_value(workers))
        self._field("🔄 Retries: ", display_value(retries))
        self._box_line()
        self._box_bottom()
        self.write("")
        self._section("TEST EXECUTION")

    def test_begin(self, browser: str, title: str) -> None:
        self.write(f"🧪 [{browser}] Running: {title}")

    def test_end(self, record: TestRecord) -> None:
        """Print the one-line result of a finished test."""
        seconds = f"{record.duration / 1000:.2f}"
        self.write(f"{status_marker(record.status)} [{record.browser}] {record.title} ({seconds}s)")
        if record.is_failure and record.error is not None:
            self.write(f"   ❌ Error: {record.error}")

    def run_end(self, summary: RunSummary, status: str) -> None:
        """Print the summary banner and, when needed, the failed tests."""
        self.write("")
        self._box_top()
        self._box_line()
        self._box_line("                    📊 TEST SUMMARY")
        self._box_line()
        self._box_divider()
        self._box_line()
        self._field("✅ Passed:    ", str(summary.passed))
        self._field("❌ Failed:    ", str(summary.failed))
        self._field("⏭️  Skipped:   ", str(summary.skipped))
        self._field("🔄 Flaky:     ", str(summary.flaky))
        if summary.other:
            self._field("🛑 Other:     ", str(summary.other))
        self._box_line()
        self._box_divider()
        self._box_line()
        self._field("📝 Total:     ", str(summary.total))
        self._field("📈 Pass Rate: ", f"{summary.pass_rate}%")
        self._field("⏱️  Duration:  ", f"{summary.duration_seconds}s")
        self._field("🏁 Status:    ", display_value(status).upper())
        self._box_line()
        self._box_bottom()
        self.write("")

        if summary.failed > 0:
            self.failed_tests(summary)

    def failed_tests(self, summary: RunSummary) -> None:
        self._section("FAILED TESTS")
        for index, record in enumerate(summary.failed_tests, start=1):
            self.write(f"{index}. {record.full_title}")
            if record.error:
                self.write(f"   Error: {record.error}")
            self.write("")

    def report_saved(self, report_path: Any, latest_path: Any) -> None:
        self.write(f"📄 Report saved: {report_path}")
        self.write(f"📄 Latest report: {latest_path}")
        self.write("")
