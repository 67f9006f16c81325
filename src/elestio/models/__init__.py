"""
Elestio SDK models.
"""

from elestio.models.catalog import ResolvedSize, SizeEntry
from elestio.models.config import Defaults, LocalConfig
from elestio.models.request import ApiRequest, HttpMethod
from elestio.models.session import Credential, Session

__all__ = [
    "ApiRequest",
    "HttpMethod",
    "Credential",
    "Session",
    "SizeEntry",
    "ResolvedSize",
    "Defaults",
    "LocalConfig",
]
