"""Suite settings data models.

Defines the dataclasses for the browser suite configuration and its
validation results.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

VALID_BROWSERS = {"chromium", "firefox", "webkit"}
VALID_SCREENSHOT_MODES = {"on", "off", "only-on-failure"}
VALID_RECORDING_MODES = {"on", "off", "retain-on-failure"}

DEFAULT_BASE_URL = "https://www.carwale.com"


@dataclass
class Viewport:
    """Browser viewport size."""
    width: int = 1920
    height: int = 1080

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass
class SuiteSettings:
    """Configuration for a suite run."""
    base_url: str = DEFAULT_BASE_URL
    test_dir: str = "tests/e2e"
    browsers: list[str] = field(default_factory=lambda: ["chromium", "firefox", "webkit"])
    retries: int = 1
    workers: Optional[int] = None  # None = one per CPU
    expect_timeout_ms: int = 10000
    action_timeout_ms: int = 15000
    navigation_timeout_ms: int = 30000
    viewport: Viewport = field(default_factory=Viewport)
    ignore_https_errors: bool = True
    headless: bool = True
    report_dir: str = "reports"
    output_dir: str = "test-results"
    screenshot: str = "only-on-failure"
    video: str = "retain-on-failure"
    tracing: str = "retain-on-failure"

    def __post_init__(self):
        self.browsers = [b.lower() for b in self.browsers]

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary."""
        data = dict(self.__dict__)
        data["viewport"] = self.viewport.to_dict()
        return data


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of settings validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
