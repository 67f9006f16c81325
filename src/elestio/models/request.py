"""
Request model for the executor.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class HttpMethod(str, Enum):
    """HTTP methods accepted by the API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ApiRequest(BaseModel):
    """A single API call: endpoint path, method and parameters."""

    endpoint: str
    method: HttpMethod = HttpMethod.POST
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def sends_query(self) -> bool:
        """GET requests carry their parameters in the query string."""
        return self.method is HttpMethod.GET
