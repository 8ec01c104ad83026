"""
Custom exceptions for dashsync.

This module defines the exception hierarchy shared by the Grafana and
GitHub clients and the sync pipeline. Client adapters translate transport
and HTTP status failures into ``ApiError`` with an ``ApiErrorKind`` tag, so
callers branch on the tag instead of on ``httpx`` exception types.

Exception Hierarchy:
    DashsyncError (base)
    ├── ConfigError (missing or invalid configuration)
    ├── ApiError (remote API failures, tagged by ApiErrorKind)
    └── PublishError (a step of the tree/commit/ref/PR chain failed)

Example:
    >>> from dashsync.core.exceptions import ApiError, ApiErrorKind
    >>> try:
    ...     raise ApiError("github", ApiErrorKind.NOT_FOUND, "No such file", status_code=404)
    ... except ApiError as e:
    ...     print(e.kind, e.context)
"""

from __future__ import annotations

from enum import Enum

import httpx


class ApiErrorKind(str, Enum):
    """Classification of a failed remote API call."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    INVALID = "invalid"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


class PublishStep(str, Enum):
    """Steps of the change publishing chain, in execution order."""

    LATEST_COMMIT = "latest_commit"
    CREATE_TREE = "create_tree"
    CREATE_COMMIT = "create_commit"
    CREATE_REF = "create_ref"
    CREATE_PULL_REQUEST = "create_pull_request"


class DashsyncError(Exception):
    """
    Base exception for all dashsync errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class ConfigError(DashsyncError):
    """Raised when required configuration (flags or environment) is missing."""


class ApiError(DashsyncError):
    """
    Exception for a failed call to the Grafana or GitHub API.

    Attributes:
        service: Name of the remote service ("grafana" or "github")
        kind: Classification of the failure
        status_code: HTTP status code, if a response was received
    """

    def __init__(
        self,
        service: str,
        kind: ApiErrorKind,
        message: str,
        status_code: int | None = None,
        **context: object,
    ) -> None:
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, service=service, kind=kind.value, **context)
        self.service = service
        self.kind = kind
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.service}] {self.message}"

    @property
    def is_not_found(self) -> bool:
        return self.kind is ApiErrorKind.NOT_FOUND


class PublishError(DashsyncError):
    """
    Exception for a failure part-way through publishing a change set.

    Publishing is not transactional: objects created by earlier steps are
    left in place. ``created`` lists them (e.g. ``{"tree": sha, "commit":
    sha}``) so they can be cleaned up by hand.

    Attributes:
        step: The step that failed
        created: Objects created by the steps that succeeded before it
    """

    def __init__(
        self,
        step: PublishStep,
        message: str,
        created: dict[str, str] | None = None,
        **context: object,
    ) -> None:
        super().__init__(message, step=step.value, **context)
        self.step = step
        self.created = dict(created or {})

    def __str__(self) -> str:
        return f"{self.step.value}: {self.message}"


def classify_status(status_code: int, headers: httpx.Headers | None = None) -> ApiErrorKind:
    """
    Classify an HTTP error status into an ``ApiErrorKind``.

    A 403 carrying ``x-ratelimit-remaining: 0`` is GitHub's primary rate
    limit response and is reported as ``RATE_LIMITED``.

    Args:
        status_code: HTTP status code
        headers: Response headers, used to spot rate limiting

    Returns:
        The matching error kind
    """
    if status_code == 404:
        return ApiErrorKind.NOT_FOUND
    if status_code == 429:
        return ApiErrorKind.RATE_LIMITED
    if status_code == 403 and headers is not None and headers.get("x-ratelimit-remaining") == "0":
        return ApiErrorKind.RATE_LIMITED
    if status_code in (401, 403):
        return ApiErrorKind.UNAUTHORIZED
    if 400 <= status_code < 500:
        return ApiErrorKind.INVALID
    if 500 <= status_code < 600:
        return ApiErrorKind.TRANSPORT
    return ApiErrorKind.UNKNOWN


def api_error_from_httpx(service: str, error: httpx.HTTPError, url: str) -> ApiError:
    """
    Translate an ``httpx`` failure into an ``ApiError``.

    Args:
        service: Name of the remote service
        error: The exception raised by httpx
        url: The URL that was requested

    Returns:
        ApiError describing the failure (caller should raise it ``from error``)
    """
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        status_code = response.status_code
        kind = classify_status(status_code, response.headers)
        return ApiError(
            service,
            kind,
            f"HTTP {status_code} from {service} API: {_response_message(response)}",
            status_code=status_code,
            url=url,
        )
    if isinstance(error, httpx.TimeoutException):
        return ApiError(
            service,
            ApiErrorKind.TRANSPORT,
            f"Request to {service} API timed out",
            url=url,
        )
    return ApiError(
        service,
        ApiErrorKind.TRANSPORT,
        f"Network error while calling {service} API: {error}",
        url=url,
    )


def _response_message(response: httpx.Response) -> str:
    """Best-effort extraction of the error message from an API response."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or "no details"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase or "no details"


__all__ = [
    "ApiError",
    "ApiErrorKind",
    "ConfigError",
    "DashsyncError",
    "PublishError",
    "PublishStep",
    "api_error_from_httpx",
    "classify_status",
]
