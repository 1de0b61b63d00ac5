"""FinTracker API: users, income and expense records over a small JSON API."""

from .logging_utils import get_logger

__version__ = "0.1.0"

__all__ = ["get_logger", "__version__"]
