"""
Server size resolution for resize operations.

Resolves a user-supplied size ("LARGE", "large-4c-8g") against the size
catalog of a provider/region and classifies the change as an upgrade or a
downgrade.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NamedTuple

from elestio.exceptions import (
    AmbiguousSizeError,
    SizeNotAvailableError,
    UnsupportedDowngradeError,
)
from elestio.logging import get_logger
from elestio.models.catalog import ResolvedSize, SizeEntry

if TYPE_CHECKING:
    from elestio.api.services.catalog import CatalogService

logger = get_logger(__name__)

DOWNGRADE_SUPPORTED_PROVIDERS = ["netcup", "aws", "azure", "scaleway"]

_CPU_RE = re.compile(r"(\d+)C", re.IGNORECASE)
_RAM_RE = re.compile(r"(\d+)G", re.IGNORECASE)


class SizeSpec(NamedTuple):
    cpu: int
    ram: int


def parse_size_spec(name: str) -> SizeSpec:
    """
    Extract core count and RAM GB from a size title.

    Example:
        >>> parse_size_spec("LARGE-4C-8G")
        SizeSpec(cpu=4, ram=8)
        >>> parse_size_spec("unknown")
        SizeSpec(cpu=0, ram=0)
    """
    cpu = _CPU_RE.search(name)
    ram = _RAM_RE.search(name)
    return SizeSpec(
        cpu=int(cpu.group(1)) if cpu else 0,
        ram=int(ram.group(1)) if ram else 0,
    )


def is_downgrade(current: str, new: str) -> bool:
    """
    True if ``new`` has fewer cores or less RAM than ``current``.

    Titles without a parsable core count are never treated as downgrades.
    """
    cur = parse_size_spec(current)
    nxt = parse_size_spec(new)
    if cur.cpu == 0 or nxt.cpu == 0:
        return False
    return nxt.cpu < cur.cpu or nxt.ram < cur.ram


def _ram_token(name: str) -> str | None:
    match = _RAM_RE.search(name)
    return match.group(0).upper() if match else None


def _unique_titles(entries: list[SizeEntry]) -> list[str]:
    return list(dict.fromkeys(e.title for e in entries))


def entries_for(entries: list[SizeEntry], provider: str, region: str | None) -> list[SizeEntry]:
    """
    Catalog entries for a provider, narrowed to the region when possible.

    Falls back to every region of the provider when none matches.
    """
    provider_entries = [e for e in entries if e.provider.lower() == provider.lower()]
    if region:
        regional = [e for e in provider_entries if e.region.lower() == region.lower()]
        if regional:
            return regional
        logger.warning(
            f"No sizes listed for {provider} in region {region}; "
            f"matching against all {provider} regions"
        )
    return provider_entries


def select_size(
    entries: list[SizeEntry],
    requested: str,
    provider: str,
    region: str | None,
    current: str | None = None,
) -> ResolvedSize:
    """
    Match a requested size against catalog entries.

    Exact (case-insensitive) title wins; otherwise the title prefix must
    identify a single entry, using the current plan's RAM to break ties.

    Raises:
        SizeNotAvailableError: Nothing matches.
        AmbiguousSizeError: Several entries match and RAM does not decide.
    """
    available = entries_for(entries, provider, region)
    wanted = requested.upper()

    for entry in available:
        if entry.title.upper() == wanted:
            return ResolvedSize(title=entry.title, requested=requested)

    candidates = [e for e in available if e.title.upper().startswith(wanted)]
    titles = _unique_titles(candidates)

    if not titles:
        raise SizeNotAvailableError(requested, provider, region, _unique_titles(available))

    if len(titles) == 1:
        return _corrected(requested, titles[0])

    current_ram = _ram_token(current) if current else None
    if current_ram:
        same_ram = [t for t in titles if _ram_token(t) == current_ram]
        if len(same_ram) == 1:
            return _corrected(requested, same_ram[0])

    raise AmbiguousSizeError(requested, titles)


def _corrected(requested: str, title: str) -> ResolvedSize:
    warning = f'Size "{requested}" auto-corrected to "{title}"'
    logger.warning(warning)
    return ResolvedSize(title=title, requested=requested, auto_corrected=True, warning=warning)


class SizeResolver:
    """
    Resolves resize targets against the catalog.

    Example:
        >>> resolver = SizeResolver(api.catalog)
        >>> size = await resolver.resolve_size("large-4c-8g", "netcup", "nbg", "MEDIUM-2C-4G")
        >>> size.title
        'LARGE-4C-8G'
    """

    def __init__(
        self,
        catalog: CatalogService,
        downgrade_providers: list[str] | None = None,
    ) -> None:
        self._catalog = catalog
        self._downgrade_providers = (
            DOWNGRADE_SUPPORTED_PROVIDERS
            if downgrade_providers is None
            else [p.lower() for p in downgrade_providers]
        )

    async def resolve_size(
        self,
        requested: str,
        provider: str,
        region: str | None,
        current: str | None = None,
    ) -> ResolvedSize:
        """
        Resolve a size and check the provider allows the change.

        Args:
            requested: Full or partial size title.
            provider: Provider name, e.g. "netcup".
            region: Provider region id, e.g. "nbg".
            current: Current size title, used for tie-breaks and downgrade checks.

        Raises:
            SizeNotAvailableError: Nothing matches.
            AmbiguousSizeError: Several entries match.
            UnsupportedDowngradeError: Downgrade on a provider without support.
        """
        entries = await self._catalog.sizes()
        resolved = select_size(entries, requested, provider, region, current)

        if current and is_downgrade(current, resolved.title):
            if provider.lower() not in self._downgrade_providers:
                raise UnsupportedDowngradeError(provider, self._downgrade_providers)
            logger.warning(f"Downgrade detected ({current} -> {resolved.title})")
            resolved.downgrade = True

        return resolved


__all__ = [
    "DOWNGRADE_SUPPORTED_PROVIDERS",
    "SizeSpec",
    "SizeResolver",
    "parse_size_spec",
    "is_downgrade",
    "entries_for",
    "select_size",
]
