"""Completion provider exceptions."""

from litellm.exceptions import AuthenticationError, RateLimitError


class ProviderError(Exception):
    """Base exception for completion provider failures.

    Attributes:
        retryable: True for transient failures worth retrying.
    """

    retryable = False


class ProviderRateLimitError(ProviderError):
    """Rate limit exceeded (HTTP 429)."""

    retryable = True


class ProviderServerError(ProviderError):
    """Server-side failure (HTTP 5xx)."""

    retryable = True


class ProviderAuthenticationError(ProviderError):
    """Authentication error (invalid API key, etc.)."""


class ProviderResponseError(ProviderError):
    """The response did not match the requested schema."""


def _status_code(e: Exception) -> int | None:
    status = getattr(e, "status_code", None)
    if status is None:
        status = getattr(e, "status", None)
    return status if isinstance(status, int) else None


def map_provider_exception(e: Exception) -> ProviderError:
    """Map LiteLLM / HTTP-style exceptions to provider exceptions.

    Args:
        e: Exception raised by the completion call.

    Returns:
        Corresponding provider exception.
    """
    if isinstance(e, ProviderError):
        return e

    message = str(e)
    status = _status_code(e)

    if isinstance(e, RateLimitError) or status == 429:
        return ProviderRateLimitError(message)
    if isinstance(e, AuthenticationError) or status in (401, 403):
        return ProviderAuthenticationError(message)
    if status is not None and 500 <= status < 600:
        return ProviderServerError(message)

    return ProviderError(message)


def is_retryable(e: Exception) -> bool:
    """Return True for rate-limit and 5xx failures."""
    return isinstance(e, ProviderError) and e.retryable
