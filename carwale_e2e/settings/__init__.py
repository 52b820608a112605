"""Settings module - suite configuration loading and validation."""

from .schema import (
    SuiteSettings,
    ValidationError,
    ValidationResult,
    Viewport,
    VALID_BROWSERS,
)
from .loader import load_settings, read_env_file
from .validator import validate_settings

__all__ = [
    "SuiteSettings",
    "ValidationError",
    "ValidationResult",
    "Viewport",
    "VALID_BROWSERS",
    "load_settings",
    "read_env_file",
    "validate_settings",
]
