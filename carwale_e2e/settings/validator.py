"""Settings validator for the CarWale suite.

Validates resolved SuiteSettings against the values Playwright and the
runner accept.
"""

from urllib.parse import urlparse

from .schema import (
    SuiteSettings,
    ValidationError,
    ValidationResult,
    VALID_BROWSERS,
    VALID_RECORDING_MODES,
    VALID_SCREENSHOT_MODES,
)


def validate_settings(settings: SuiteSettings) -> ValidationResult:
    """Validate suite settings.

    Checks:
    - Base URL scheme and host
    - Browser names
    - Timeouts, retries and worker count
    - Viewport size
    - Artifact capture modes

    Args:
        settings: Resolved settings to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    parsed = urlparse(settings.base_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        errors.append(ValidationError(
            path="base_url",
            message=f"Invalid base URL '{settings.base_url}'. Must be an http(s) URL.",
        ))

    for i, browser in enumerate(settings.browsers):
        if browser not in VALID_BROWSERS:
            errors.append(ValidationError(
                path=f"browsers[{i}]",
                message=f"Invalid browser '{browser}'. Must be one of: {', '.join(sorted(VALID_BROWSERS))}",
            ))

    if not settings.browsers:
        warnings.append(ValidationError(
            path="browsers",
            message="No browsers configured. pytest-playwright will default to chromium.",
            severity="warning",
        ))

    for name in ("expect_timeout_ms", "action_timeout_ms", "navigation_timeout_ms"):
        value = getattr(settings, name)
        if value <= 0:
            errors.append(ValidationError(
                path=name,
                message=f"Timeout must be positive, got {value}.",
            ))

    if settings.retries < 0:
        errors.append(ValidationError(
            path="retries",
            message=f"Retries must not be negative, got {settings.retries}.",
        ))

    if settings.workers is not None and settings.workers <= 0:
        errors.append(ValidationError(
            path="workers",
            message=f"Workers must be positive, got {settings.workers}.",
        ))

    if settings.viewport.width <= 0 or settings.viewport.height <= 0:
        errors.append(ValidationError(
            path="viewport",
            message=(
                f"Invalid viewport {settings.viewport.width}x{settings.viewport.height}. "
                "Width and height must be positive integers."
            ),
        ))

    if settings.screenshot not in VALID_SCREENSHOT_MODES:
        errors.append(ValidationError(
            path="screenshot",
            message=f"Invalid screenshot mode '{settings.screenshot}'. Must be one of: {', '.join(sorted(VALID_SCREENSHOT_MODES))}",
        ))

    for name in ("video", "tracing"):
        value = getattr(settings, name)
        if value not in VALID_RECORDING_MODES:
            errors.append(ValidationError(
                path=name,
                message=f"Invalid {name} mode '{value}'. Must be one of: {', '.join(sorted(VALID_RECORDING_MODES))}",
            ))

    if settings.navigation_timeout_ms < settings.action_timeout_ms:
        warnings.append(ValidationError(
            path="navigation_timeout_ms",
            message="Navigation timeout is shorter than the action timeout.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )
