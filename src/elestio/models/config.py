"""
Local configuration file model (``config.json``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Defaults(BaseModel):
    """Deployment defaults applied when options are omitted."""

    provider: str = "netcup"
    datacenter: str = "nbg"
    server_type: str = Field(default="MEDIUM-2C-4G", alias="serverType")
    support: str = "level1"

    model_config = ConfigDict(populate_by_name=True)


class LocalConfig(BaseModel):
    """Contents of ``config.json``; credentials are never stored here."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    jwt: str | None = None
    jwt_expiry: int | None = Field(default=None, alias="jwtExpiry")
    default_project: str | None = Field(default=None, alias="defaultProject")
    defaults: Defaults = Field(default_factory=Defaults)
