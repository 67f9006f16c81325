"""
Elestio SDK exceptions.

All errors raised by the client derive from :class:`ElestioError`, so
callers can surface ``str(error)`` directly to the user.
"""

from __future__ import annotations

from typing import Any


class ElestioError(Exception):
    """Base error for the Elestio SDK."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._original_cause = cause

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration / authentication
# =============================================================================


class ConfigurationError(ElestioError):
    """Required local configuration is missing."""

    def __init__(self, message: str = "Not configured. Run: elestio login") -> None:
        super().__init__(message)


class AuthenticationError(ElestioError):
    """Credential exchange was rejected or could not be completed."""

    def __init__(
        self,
        message: str = "Authentication failed",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)


class AuthRetryExhausted(ElestioError):
    """The request still failed authentication after a forced refresh."""

    def __init__(self, status_code: int, server_message: str | None = None) -> None:
        self.status_code = status_code
        self.server_message = server_message
        detail = f": {server_message}" if server_message else ""
        super().__init__(
            f"Authentication failed again after token refresh (HTTP {status_code}){detail}"
        )


class InvalidResponseError(ElestioError):
    """Response body could not be decoded as JSON."""

    def __init__(self, status_code: int, cause: BaseException | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"Invalid JSON response (HTTP {status_code})", cause=cause)


class APIError(ElestioError):
    """The API reported a domain-level failure."""

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


# =============================================================================
# Deployment
# =============================================================================


class DeploymentTimeoutError(ElestioError):
    """Deployment did not complete before the deadline."""

    def __init__(self, resource_id: str, elapsed: float, timeout: float) -> None:
        self.resource_id = resource_id
        self.elapsed = elapsed
        self.timeout = timeout
        super().__init__(
            f"Deployment of {resource_id} timed out after {elapsed:.0f}s "
            f"(limit {timeout:.0f}s)"
        )


# =============================================================================
# Sizing
# =============================================================================


class SizeNotAvailableError(ElestioError):
    """Requested size does not exist for the provider/region."""

    def __init__(
        self,
        requested: str,
        provider: str,
        region: str | None,
        available: list[str],
    ) -> None:
        self.requested = requested
        self.provider = provider
        self.region = region
        self.available = available
        super().__init__(
            f'Size "{requested}" not available for {provider}/{region}. '
            f"Available: {', '.join(available)}"
        )


class AmbiguousSizeError(ElestioError):
    """Requested size prefix matches several catalog entries."""

    def __init__(self, requested: str, candidates: list[str]) -> None:
        self.requested = requested
        self.candidates = candidates
        super().__init__(f'Multiple sizes match "{requested}": {", ".join(candidates)}')


class UnsupportedDowngradeError(ElestioError):
    """Provider does not allow resizing to a smaller plan."""

    def __init__(self, provider: str, supported: list[str]) -> None:
        self.provider = provider
        self.supported = supported
        super().__init__(
            f"Downgrade not supported on {provider}. Supported: {', '.join(supported)}"
        )


# =============================================================================
# Resources
# =============================================================================


class ServiceNotFoundError(ElestioError):
    """No service with the given vmID exists in the project."""

    def __init__(self, vm_id: str) -> None:
        self.vm_id = vm_id
        super().__init__(f"Service with vmID {vm_id} not found")


class TemplateNotFoundError(ElestioError):
    """No catalog template matches the given name or id."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'Template "{name}" not found. Use: elestio templates search <name>'
        )


class ActionNotAllowedError(ElestioError):
    """The action is refused locally before reaching the API."""


__all__ = [
    "ElestioError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthRetryExhausted",
    "InvalidResponseError",
    "APIError",
    "DeploymentTimeoutError",
    "SizeNotAvailableError",
    "AmbiguousSizeError",
    "UnsupportedDowngradeError",
    "ServiceNotFoundError",
    "TemplateNotFoundError",
    "ActionNotAllowedError",
]
