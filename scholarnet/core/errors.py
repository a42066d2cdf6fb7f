"""
error kinds raised by scholarnet.

every error carries a machine-readable code and whether a crawl can
continue past it (prune the branch) or must stop.
"""

from typing import Any, Dict, Optional


class ScholarError(Exception):
    """base class for all scholarnet errors."""
    code = "SCHOLAR_ERROR"
    recoverable = False

    def __init__(self, message: str = "", **details: Any):
        super().__init__(message or self.default_message())
        self.message = message or self.default_message()
        self.details: Dict[str, Any] = details

    @classmethod
    def default_message(cls) -> str:
        return cls.__doc__.strip().rstrip(".") if cls.__doc__ else cls.code

    def __str__(self):
        return f"[{self.code}] {self.message}"


class InvalidQueryError(ScholarError):
    """invalid query."""
    code = "INVALID_QUERY"
    recoverable = False


class BadHtmlError(ScholarError):
    """bad HTML structure."""
    code = "BAD_HTML"
    recoverable = True


class BlockedError(ScholarError):
    """request blocked."""
    code = "BLOCKED"
    recoverable = True


class NetworkError(ScholarError):
    """network failure."""
    code = "NETWORK_ERROR"
    recoverable = True

    def __init__(self, message: str = "", url: Optional[str] = None, **details: Any):
        super().__init__(message, **details)
        self.url = url


# errors that only prune a descendant branch during a crawl
BRANCH_ERRORS = (BadHtmlError, BlockedError, NetworkError)
