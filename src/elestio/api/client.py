"""
Elestio API Client.

Unified client wiring the local stores, the session manager and the
request executor, with lazily created service wrappers.
"""

from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import httpx

from elestio.api.config import get_base_url
from elestio.api.executor import RequestExecutor
from elestio.api.session import SessionManager
from elestio.config import SDKSettings, get_settings
from elestio.store import ConfigStore, CredentialStore, SessionStore

if TYPE_CHECKING:
    from elestio.api.services.actions import ActionsService
    from elestio.api.services.backups import BackupsService
    from elestio.api.services.catalog import CatalogService
    from elestio.api.services.pipelines import PipelinesService
    from elestio.api.services.projects import ProjectsService
    from elestio.api.services.servers import ServicesService
    from elestio.api.services.volumes import VolumesService
    from elestio.services.sizing import SizeResolver


class ElestioAPI:
    """
    Unified Elestio API client.

    Example:
        >>> # Credentials and session come from ~/.elestio
        >>> async with ElestioAPI() as api:
        ...     projects = await api.projects.list()
        ...     services = await api.services.list(projects[0]["projectID"])

        >>> # Custom base URL and config directory
        >>> api = ElestioAPI(base_url="http://localhost:8000", config_dir=Path("/tmp/elestio"))
    """

    def __init__(
        self,
        base_url: str | None = None,
        config_dir: Path | None = None,
        timeout: float | None = None,
        settings: SDKSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize Elestio API client.

        Args:
            base_url: API base URL (defaults to settings)
            config_dir: Directory holding credentials and config.json
            timeout: Request timeout in seconds
            settings: Settings instance (defaults to get_settings())
            transport: Custom httpx transport
            clock: Monotonic clock used for deployment polling
            sleep: Async sleep used for deployment polling
        """
        self._settings = settings or get_settings()
        self._base_url = get_base_url(base_url or self._settings.api_base_url)
        self._config_dir = Path(config_dir or self._settings.config_dir)
        self._clock = clock
        self._sleep = sleep

        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or self._settings.request_timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

        self.credential_store = CredentialStore(self._config_dir)
        self.config_store = ConfigStore(self._config_dir)
        self.session = SessionManager(
            self.credential_store,
            SessionStore(self.config_store),
            self._http,
            token_lifetime=timedelta(hours=self._settings.token_lifetime_hours),
            refresh_margin=timedelta(seconds=self._settings.token_refresh_margin),
        )
        self.executor = RequestExecutor(self.session, self._http)

        # Lazy-initialized services
        self._projects_service: ProjectsService | None = None
        self._services_service: ServicesService | None = None
        self._actions_service: ActionsService | None = None
        self._catalog_service: CatalogService | None = None
        self._size_resolver: SizeResolver | None = None
        self._volumes_service: VolumesService | None = None
        self._backups_service: BackupsService | None = None
        self._pipelines_service: PipelinesService | None = None

    @property
    def projects(self) -> ProjectsService:
        """Access projects API."""
        if self._projects_service is None:
            from elestio.api.services.projects import ProjectsService

            self._projects_service = ProjectsService(self.executor, self.config_store)
        return self._projects_service

    @property
    def catalog(self) -> CatalogService:
        """Access public catalog (templates, sizes)."""
        if self._catalog_service is None:
            from elestio.api.services.catalog import CatalogService

            self._catalog_service = CatalogService(self.executor)
        return self._catalog_service

    @property
    def services(self) -> ServicesService:
        """Access services API."""
        if self._services_service is None:
            from elestio.api.services.servers import ServicesService

            self._services_service = ServicesService(
                self.executor,
                self.catalog,
                self.config_store,
                self.credential_store,
                self._settings,
                clock=self._clock,
                sleep=self._sleep,
            )
        return self._services_service

    @property
    def sizes(self) -> SizeResolver:
        """Size resolver over the catalog."""
        if self._size_resolver is None:
            from elestio.services.sizing import SizeResolver

            self._size_resolver = SizeResolver(self.catalog)
        return self._size_resolver

    @property
    def actions(self) -> ActionsService:
        """Access server actions API."""
        if self._actions_service is None:
            from elestio.api.services.actions import ActionsService

            self._actions_service = ActionsService(self.executor, self.services, self.sizes)
        return self._actions_service

    @property
    def volumes(self) -> VolumesService:
        """Access block storage volumes API."""
        if self._volumes_service is None:
            from elestio.api.services.volumes import VolumesService

            self._volumes_service = VolumesService(self.executor, self.actions, self.config_store)
        return self._volumes_service

    @property
    def backups(self) -> BackupsService:
        """Access backups and snapshots API."""
        if self._backups_service is None:
            from elestio.api.services.backups import BackupsService

            self._backups_service = BackupsService(self.executor, self.actions)
        return self._backups_service

    @property
    def pipelines(self) -> PipelinesService:
        """Access CI/CD pipelines API."""
        if self._pipelines_service is None:
            from elestio.api.services.pipelines import PipelinesService

            self._pipelines_service = PipelinesService(self.executor, self.config_store)
        return self._pipelines_service

    @property
    def base_url(self) -> str:
        """Get current base URL."""
        return self._base_url

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    async def __aenter__(self) -> ElestioAPI:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.aclose()

    def __repr__(self) -> str:
        return f"<ElestioAPI base_url={self._base_url!r} config_dir={str(self._config_dir)!r}>"


__all__ = ["ElestioAPI"]
