"""Core Notion transport shared by the sync engine and the CLI."""

from .async_utils import run_sync
from .client import NotionClient
from .errors import NotionAPIError, NotionClientError, NotionSyncError
from .rate_limiter import RateLimiter

__all__ = [
    "NotionAPIError",
    "NotionClient",
    "NotionClientError",
    "NotionSyncError",
    "RateLimiter",
    "run_sync",
]
