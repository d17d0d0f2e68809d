"""Exception types for the Fabric L2 provider.

Exception Hierarchy:
    ProviderError (base)
    ├── ResourceValidationError - Resource configuration rejected before any API call
    ├── ConfigurationError - Provider block (endpoint, credentials) is unusable
    ├── CredentialResolutionError - No AWS credential source yielded a key pair
    ├── TransportError - Network failure talking to the Fabric API
    ├── RestError - Fabric API answered with an error status
    ├── OperationError - Lifecycle step failed after a remote change
    └── StateWaitError - Waiting for a connection status did not succeed
        ├── WaitTimeoutError
        ├── UnexpectedStateError
        └── ResourceNotFoundError
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import BaseModel


class ProviderError(Exception):
    """Base exception for all provider errors.

    Attributes:
        message: Human-readable error description
        context: Additional contextual information (connection IDs, statuses)
    """

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ResourceValidationError(ProviderError):
    """Raised when a resource configuration violates its schema rules.

    Every problem found is listed in ``errors`` so the caller can report them
    all at once.
    """

    def __init__(self, resource_type: str, errors: list[str]):
        super().__init__(
            f"invalid {resource_type} configuration: " + "; ".join(errors),
            {"resource_type": resource_type},
        )
        self.resource_type = resource_type
        self.errors = errors


class ConfigurationError(ProviderError):
    """Raised when the provider configuration cannot build an API client."""

    pass


class CredentialResolutionError(ProviderError):
    """Raised when no credential source yields an access key and secret key."""

    pass


class TransportError(ProviderError):
    """Raised when a request to the Fabric API fails below the HTTP layer."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ApplicationError(BaseModel):
    """Single business error reported by the Fabric API."""

    code: str = ""
    property: str | None = None
    message: str | None = None


class RestError(ProviderError):
    """Raised when the Fabric API responds with a non-success status.

    Attributes:
        status_code: HTTP status of the response
        application_errors: Parsed error entries from the response body
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        application_errors: Iterable[ApplicationError] = (),
    ):
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code
        self.application_errors = list(application_errors)

    def has_application_error_code(self, code: str) -> bool:
        return any(e.code == code for e in self.application_errors)

    def __str__(self) -> str:
        base = f"{self.message} (HTTP {self.status_code})"
        if not self.application_errors:
            return base
        details = ", ".join(
            f"[{e.code}] {e.message or ''}".rstrip() for e in self.application_errors
        )
        return f"{base}: {details}"


class StateWaitError(ProviderError):
    """Base class for failures while waiting on a connection status."""

    pass


class WaitTimeoutError(StateWaitError, TimeoutError):
    """Raised when the target status is not reached within the timeout."""

    def __init__(self, timeout: float, last_status: str | None, target: Iterable[str]):
        super().__init__(
            f"timeout while waiting for state to become {', '.join(sorted(target))}",
            {"last_state": last_status or "", "timeout": f"{timeout:g}s"},
        )
        self.timeout = timeout
        self.last_status = last_status


class UnexpectedStateError(StateWaitError):
    """Raised when a polled status is neither pending nor a target."""

    def __init__(self, status: str, expected: Iterable[str]):
        super().__init__(
            f"unexpected state {status!r}, wanted target {', '.join(sorted(expected))}",
            {"state": status},
        )
        self.status = status


class ResourceNotFoundError(StateWaitError):
    """Raised when the polled object keeps coming back empty."""

    def __init__(self, checks: int):
        super().__init__(f"couldn't find resource ({checks} retries)")
        self.checks = checks


class OperationError(ProviderError):
    """Raised when a lifecycle operation fails after the remote side changed.

    ``state`` holds what is known about the resource at the point of failure
    (for example the ID of a connection that was created but never became
    ready) so the host can keep tracking it.
    """

    def __init__(self, message: str, state: Any = None):
        super().__init__(message)
        self.state = state
