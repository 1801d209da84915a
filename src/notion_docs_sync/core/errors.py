"""Exception types raised by the Notion transport."""


class NotionSyncError(Exception):
    """Base class for all errors raised by notion_docs_sync."""


class NotionAPIError(NotionSyncError):
    """The Notion API answered with an error status.

    Attributes:
        message: Human-readable message from the API (or the raw body).
        status_code: HTTP status code.
        code: Notion error code, e.g. ``object_not_found``.
    """

    def __init__(
        self, message: str, status_code: int = 0, code: str = ""
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.code == "object_not_found" or self.status_code == 404

    def __str__(self) -> str:
        if self.code:
            return f"{self.code}: {self.message}"
        return self.message


class NotionClientError(NotionSyncError):
    """A remote operation failed; the message names the operation and target."""
