"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_QUERY_BATCH_SIZE,
    DEFAULT_QUERY_PAGE_SIZE,
    DEFAULT_SAVE_LOCATION,
)
from .retry import retry_on_rate_limit

__all__ = [
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_QUERY_BATCH_SIZE",
    "DEFAULT_QUERY_PAGE_SIZE",
    "DEFAULT_SAVE_LOCATION",
    "retry_on_rate_limit",
]
