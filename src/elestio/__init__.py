"""
Elestio SDK.

Async client and command-line interface for the Elestio DevOps platform.

Usage:
    >>> from elestio import ElestioAPI
    >>> async with ElestioAPI() as api:
    ...     await api.session.login("me@example.com", "api-token")
    ...     result = await api.services.deploy("postgres")
"""

from elestio.api import ElestioAPI
from elestio.exceptions import (
    AmbiguousSizeError,
    APIError,
    AuthenticationError,
    AuthRetryExhausted,
    ConfigurationError,
    DeploymentTimeoutError,
    ElestioError,
    SizeNotAvailableError,
    UnsupportedDowngradeError,
)

__version__ = "0.3.0"

__all__ = [
    "ElestioAPI",
    "ElestioError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthRetryExhausted",
    "APIError",
    "DeploymentTimeoutError",
    "SizeNotAvailableError",
    "AmbiguousSizeError",
    "UnsupportedDowngradeError",
    "__version__",
]
