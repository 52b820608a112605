"""Reporting module - run aggregation, console output and JSON reports."""

from .aggregator import RunAggregator, RunConfig, RunStateError, TestCaseInfo, TestOutcome
from .console import ConsoleRenderer
from .json_reporter import LATEST_REPORT_NAME, JsonReporter
from .summary import RunSummary, TestRecord, TestStatus

__all__ = [
    "RunAggregator",
    "RunConfig",
    "RunStateError",
    "TestCaseInfo",
    "TestOutcome",
    "ConsoleRenderer",
    "JsonReporter",
    "LATEST_REPORT_NAME",
    "RunSummary",
    "TestRecord",
    "TestStatus",
]
