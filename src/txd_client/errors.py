"""Error types raised by txd_client components.

Every failure in the submission flow is reported as a ``TxdError``. The
concrete subclass tells the caller whether retrying can help; the original
exception is kept in ``cause`` (and chained via ``raise ... from``).
"""

from __future__ import annotations


class TxdError(Exception):
    """Base class for all submission failures."""

    retryable: bool = False

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class TransportError(TxdError):
    """Network failure or relay-side 5xx. Safe to retry."""

    retryable = True


class MalformedResponseError(TxdError):
    """The relay answered with something we do not understand."""


class RelayRejectedError(TxdError):
    """The relay refused the request (HTTP 4xx)."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.status_code = status_code
        self.body = body


class CryptoError(TxdError):
    """Key derivation or signing failed."""


class EncodingError(TxdError):
    """Serialization or hex/base64 decoding failed."""


class PollTimeoutError(TxdError):
    """Polling gave up before the submission reached a terminal status."""

    def __init__(self, message: str, submission_id: str, attempts: int) -> None:
        super().__init__(message)
        self.submission_id = submission_id
        self.attempts = attempts
