"""
Catalog models (server sizes).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SizeEntry(BaseModel):
    """One server size offered by a provider in a region."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    title: str
    provider: str = Field(default="", alias="providerName")
    region: str = Field(default="", alias="regionID")
    cpu: int | None = Field(default=None, alias="vCPU")
    ram_gb: float | None = Field(default=None, alias="ramGB")

    country: str | None = Field(default=None, alias="Country")
    country_code: str | None = Field(default=None, alias="CountryCode")
    city: str | None = Field(default=None, alias="City")
    storage_gb: float | None = Field(default=None, alias="storageSizeGB")
    storage_type: str | None = Field(default=None, alias="storageType")
    price_per_hour: float | None = Field(default=None, alias="pricePerHour")

    @field_validator(
        "cpu", "ram_gb", "storage_gb", "price_per_hour", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("provider", "region", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def location(self) -> str:
        return f"{self.city or '?'}, {self.country_code or '?'}"

    @property
    def price_monthly(self) -> float | None:
        if self.price_per_hour is None:
            return None
        return self.price_per_hour * 24 * 30


class ResolvedSize(BaseModel):
    """Outcome of resolving a requested size against the catalog."""

    title: str
    requested: str
    auto_corrected: bool = False
    warning: str | None = None
    downgrade: bool = False
