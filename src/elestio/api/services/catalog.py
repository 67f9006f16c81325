"""
Catalog service for Elestio API.

Templates and server sizes come from public endpoints and are cached for
the lifetime of the service instance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.api.config import SIZES_LIST, TEMPLATES_LIST
from elestio.models.catalog import SizeEntry
from elestio.models.request import ApiRequest, HttpMethod

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor

TEMPLATE_ALIASES = {
    "cicd": "CI-CD-Target",
    "ci-cd": "CI-CD-Target",
    "postgres": "PostgreSQL",
    "pg": "PostgreSQL",
    "mysql": "MySQL",
    "mariadb": "MariaDB",
    "mongo": "MongoDB",
    "mongodb": "MongoDB",
    "elastic": "Elasticsearch",
    "elasticsearch": "Elasticsearch",
    "wp": "Wordpress",
    "wordpress": "Wordpress",
    "k8s": "K3S",
    "kubernetes": "K3S",
}


def _lower(value: Any) -> str:
    return str(value).lower() if value is not None else ""


class CatalogService:
    """
    Public catalog: software templates and server sizes.

    Example:
        >>> async with ElestioAPI() as api:
        ...     template = await api.catalog.find_template("pg")
        ...     sizes = await api.catalog.filter_sizes(provider="netcup")
    """

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor
        self._templates: list[dict[str, Any]] | None = None
        self._sizes: list[SizeEntry] | None = None

    async def _instances(self, endpoint: str) -> list[dict[str, Any]]:
        response = await self._executor.execute_unauthenticated(
            ApiRequest(endpoint=endpoint, method=HttpMethod.GET)
        )
        if not isinstance(response, dict):
            return []
        return response.get("instances") or []

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    async def templates(self) -> list[dict[str, Any]]:
        if self._templates is None:
            self._templates = await self._instances(TEMPLATES_LIST)
        return self._templates

    async def search_templates(
        self,
        query: str | None = None,
        category: str | None = None,
    ) -> list[dict[str, Any]]:
        """Templates whose title or description contains ``query``."""
        q = (query or "").lower()
        cat = (category or "").lower()
        return [
            t
            for t in await self.templates()
            if (not q or q in _lower(t.get("title")) or q in _lower(t.get("description")))
            and (not cat or cat in _lower(t.get("category")))
        ]

    async def find_template(self, name_or_id: str | int) -> dict[str, Any] | None:
        """
        Find a template by id, alias, exact title, then title substring.

        Example:
            >>> await api.catalog.find_template("pg")  # PostgreSQL
        """
        templates = await self.templates()
        key = str(name_or_id)
        lowered = key.lower()

        for t in templates:
            if str(t.get("id")) == key:
                return t

        alias = TEMPLATE_ALIASES.get(lowered)
        if alias:
            for t in templates:
                if _lower(t.get("title")) == alias.lower():
                    return t

        for t in templates:
            if _lower(t.get("title")) == lowered:
                return t

        return next((t for t in templates if lowered in _lower(t.get("title"))), None)

    async def categories(self) -> list[str]:
        return sorted({t["category"] for t in await self.templates() if t.get("category")})

    # -------------------------------------------------------------------------
    # Sizes
    # -------------------------------------------------------------------------

    async def sizes(self) -> list[SizeEntry]:
        """Size catalog, fetched on first use."""
        if self._sizes is None:
            instances = await self._instances(SIZES_LIST)
            self._sizes = [SizeEntry.model_validate(i) for i in instances if i.get("title")]
        return self._sizes

    async def refresh(self) -> list[SizeEntry]:
        """Fetch the catalog again, replacing the cached copy."""
        self._templates = None
        self._sizes = None
        return await self.sizes()

    async def filter_sizes(
        self,
        provider: str | None = None,
        country: str | None = None,
    ) -> list[SizeEntry]:
        """Sizes for a provider and/or country (name substring or code)."""
        prov = (provider or "").lower()
        ctry = (country or "").lower()
        return [
            s
            for s in await self.sizes()
            if (not prov or s.provider.lower() == prov)
            and (
                not ctry
                or ctry in _lower(s.country)
                or _lower(s.country_code) == ctry
            )
        ]
