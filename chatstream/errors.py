"""
Error taxonomy for chatstream.

Every failure surfaced to a caller is a ``ChatStreamError``.  Foreign
exceptions and rejected values are normalized through ``classify_error``,
which passes already-classified errors through untouched so an error is
never wrapped twice on its way out of the stream.
"""

from __future__ import annotations

from typing import Any


class ChatStreamError(Exception):
    """Base error carrying a readable message and the original cause."""

    def __init__(
        self,
        message: str,
        cause: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = dict(details or {})
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_error(
        cls,
        error: Any,
        message: str | None = None,
        **details: Any,
    ) -> ChatStreamError:
        """Create an instance of *cls* from an arbitrary thrown value."""
        if isinstance(error, BaseException):
            text = str(error) or type(error).__name__
        else:
            text = str(error)
        if message:
            text = f"{message}: {text}"
        return cls(text, cause=error, details=details)


class ConfigurationError(ChatStreamError):
    """Required configuration (endpoint, credential) is missing."""


class ProviderStreamError(ChatStreamError):
    """The provider failed: an error part in the stream or a failed call."""


class NoTextAfterToolsError(ChatStreamError):
    """The model invoked tools but produced no usable text afterwards."""

    def __init__(
        self,
        message: str,
        cause: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, cause, details)
        self.tool_calls_count = self.details.get("tool_calls_count", 0)
        self.finish_reason = self.details.get("finish_reason", "unknown")


class EmptyStreamError(ChatStreamError):
    """The stream finished without fragments, tool calls or final text."""


class SettlementTimeoutError(ChatStreamError):
    """A settlement value did not resolve within its deadline."""

    def __init__(
        self,
        message: str,
        cause: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, cause, details)
        self.timeout = self.details.get("timeout")


class SettlementFailureError(ChatStreamError):
    """A settlement value rejected while the result was being settled."""


def classify_error(
    error: Any,
    message: str | None = None,
    *,
    error_cls: type[ChatStreamError] = ChatStreamError,
    **details: Any,
) -> ChatStreamError:
    """
    Normalize any raised or rejected value into a ``ChatStreamError``.

    Already-classified errors are returned as-is.  Exceptions keep their
    message and become the cause.  Any other value is stringified for the
    message and kept as the cause.
    """
    if isinstance(error, ChatStreamError):
        return error
    try:
        return error_cls.from_error(error, message, **details)
    except Exception:  # pragma: no cover - str() of a hostile object
        return error_cls(message or "Unknown error", cause=error, details=details)
