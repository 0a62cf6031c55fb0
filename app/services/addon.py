"""High level façade answering the add-on's catalog, meta and stream requests."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import ResolverError
from ..models import META_ID_PREFIX, CatalogRef, ItemRecord, StreamCandidate
from ..utils import matches_search
from .cache import LookupCache
from .catalogs import CatalogDiscovery
from .fetcher import Fetcher
from .file_host import FileHostClient
from .listing import ListingWalker
from .locator import ItemLocator
from .page_reader import BhojpuriRaasPageReader, PageReader
from .streams import StreamResolver

logger = logging.getLogger(__name__)

MANIFEST_ID = "org.bhojpuriraas"
MANIFEST_VERSION = "1.0.0"


class AddonService:
    """Wires the resolution pipeline together and degrades failures to empties."""

    def __init__(
        self,
        settings: Settings,
        fetcher: Fetcher,
        reader: PageReader | None = None,
        cache: LookupCache | None = None,
    ) -> None:
        self._settings = settings
        self._reader = reader or BhojpuriRaasPageReader()
        self._cache = cache if cache is not None else LookupCache()
        self._discovery = CatalogDiscovery(settings, fetcher, self._reader)
        self._walker = ListingWalker(settings, fetcher, self._reader, self._cache)
        self._locator = ItemLocator(self._walker, self._reader, self._cache)
        self._resolver = StreamResolver(
            settings,
            fetcher,
            self._reader,
            self._locator,
            FileHostClient(settings, fetcher),
            self._cache,
        )
        self._catalogs: list[CatalogRef] = []

    @classmethod
    def from_http_client(
        cls, settings: Settings, http_client: httpx.AsyncClient
    ) -> "AddonService":
        return cls(settings, Fetcher(settings, http_client))

    @property
    def cache(self) -> LookupCache:
        return self._cache

    async def start(self) -> bool:
        """Discover the catalogs advertised in the manifest."""

        self._catalogs = await self._discover()
        return bool(self._catalogs)

    def list_catalogs(self) -> list[CatalogRef]:
        return list(self._catalogs)

    def manifest(self) -> dict[str, Any]:
        return {
            "id": MANIFEST_ID,
            "version": MANIFEST_VERSION,
            "name": self._settings.app_name,
            "description": "Bhojpuri movies from bhojpuriraas.net",
            "resources": ["stream", "meta", "catalog"],
            "types": ["movie"],
            "catalogs": [catalog.to_manifest_entry() for catalog in self._catalogs],
            "logo": self._settings.logo_url,
            "idPrefixes": [META_ID_PREFIX],
            "extra": {"search": {"types": ["movie"]}},
        }

    async def list_items(
        self, catalog_id: str, search: str | None = None
    ) -> list[ItemRecord]:
        """Return the items of ``catalog_id``, filtered by ``search`` when given."""

        catalogs = await self._discover() or self._catalogs
        catalog = next((entry for entry in catalogs if entry.id == catalog_id), None)
        if catalog is None:
            logger.info("Unknown catalog requested: %s", catalog_id)
            return []

        query = (search or "").strip()
        match = (lambda record: matches_search(record.title, query)) if query else None
        try:
            summaries = await self._walker.walk(catalog.listing_url, match)
        except ResolverError as exc:
            logger.warning("Listing %s failed: %s", catalog.listing_url, exc)
            return []

        records: list[ItemRecord] = []
        for summary in summaries:
            record = self._cache.get_record(summary.id)
            if record is None:
                record = ItemRecord.from_summary(summary)
            records.append(record)
        return records

    async def get_item_meta(self, item_id: str) -> ItemRecord | None:
        """Return the record for ``item_id`` from cache or a targeted re-walk."""

        record = self._cache.get_record(item_id)
        if record is not None:
            return record

        location = self._cache.get_location(item_id)
        if location is None:
            return None
        try:
            await self._walker.walk(location.catalog_url)
        except ResolverError as exc:
            logger.warning("Re-walking %s for %s failed: %s", location.catalog_url, item_id, exc)
            return None
        return self._cache.get_record(item_id)

    async def get_streams(self, item_id: str) -> list[StreamCandidate]:
        """Resolve playable streams for ``item_id``; never raises."""

        catalogs = self._catalogs or await self._discover()
        try:
            return await self._resolver.resolve(item_id, catalogs)
        except Exception:  # pragma: no cover - defensive logging branch
            logger.exception("Unexpected failure resolving streams for %s", item_id)
            return []

    async def _discover(self) -> list[CatalogRef]:
        try:
            return await self._discovery.discover()
        except ResolverError as exc:
            logger.warning("Catalog discovery failed: %s", exc)
            return []
