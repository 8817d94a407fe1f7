"""Custom exceptions for promrw."""

from typing import Any


class PromRWError(Exception):
    """Base exception for all promrw errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(PromRWError):
    """Configuration-related errors."""

    pass


class LabelValidationError(PromRWError):
    """A label name, or the value of the __name__ label, breaks the naming grammar."""

    def __init__(self, message: str, label: str, value: str, pattern: str) -> None:
        super().__init__(message, label=label, value=value, pattern=pattern)
        self.label = label
        self.value = value
        self.pattern = pattern


class EncodeError(PromRWError):
    """Serializing or compressing a write request failed."""

    pass


class TransmitError(PromRWError):
    """Base class for remote write delivery errors.

    ``status_code`` is only set when the endpoint actually answered.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code
        self.body = body


class TransmitConnectionError(TransmitError):
    """No response was obtained from the endpoint."""

    def __init__(self, url: str, details: str) -> None:
        super().__init__(
            f"Remote write request to {url} failed: {details}",
            url=url,
            details=details,
        )


class TransmitTimeoutError(TransmitError):
    """The request did not complete within its deadline."""

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        super().__init__(
            f"Remote write request to {url} timed out after {timeout_seconds}s",
            url=url,
            timeout_seconds=timeout_seconds,
        )


class TransmitStatusError(TransmitError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, body: str | None = None) -> None:
        if body is None:
            message = f"Remote write request failed with status code: {status_code}"
        else:
            message = (
                f"Remote write request failed with status code: {status_code}, "
                f"error returned from endpoint: {body}"
            )
        super().__init__(message, status_code=status_code, body=body, url=url)
