"""Exception hierarchy shared by every dredger component.

Fatal errors (listing failures, tokenizer failures, missing
credentials) propagate to the caller. Recoverable ones (a single file
that cannot be fetched or documented) are logged and downgraded where
they occur.
"""

from typing import Optional


class DredgerError(Exception):
    """Base class for all dredger errors."""


class ConfigError(DredgerError):
    """Raised when required configuration (e.g. the token) is missing or invalid."""


class RemoteError(DredgerError):
    """Raised when a hosting API request fails.

    Attributes:
        status: HTTP status code, or None for transport failures.
        url: The URL that was requested.
        body: Response body text, kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        url: Optional[str] = None,
        body: str = "",
    ) -> None:
        self.status = status
        self.url = url
        self.body = body
        detail = message
        if status is not None:
            detail = f"{detail} (HTTP {status})"
        if url:
            detail = f"{detail} [{url}]"
        if body:
            detail = f"{detail}: {body[:500]}"
        super().__init__(detail)


class TokenizerLoadError(DredgerError):
    """Raised when the tokenizer model file is missing or malformed."""


class TokenizationError(DredgerError):
    """Raised when text cannot be tokenized."""


class ModelQueryError(DredgerError):
    """Raised when a model query fails in transport or framing."""


class OperationCancelled(DredgerError):
    """Raised when the caller's cancellation signal is set mid-run."""
