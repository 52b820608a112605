"""CarWale end-to-end browser test suite."""

__version__ = "0.1.0"
