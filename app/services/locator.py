"""Finding which listing page carries a given item."""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Sequence

from ..errors import NetworkError
from ..models import CatalogLocation, CatalogRef, LocateResult
from .cache import LookupCache
from .listing import ListingWalker
from .page_reader import PageReader

logger = logging.getLogger(__name__)


class ItemLocator:
    """Searches catalog listings for an item, trusting the cache first."""

    def __init__(
        self, walker: ListingWalker, reader: PageReader, cache: LookupCache
    ) -> None:
        self._walker = walker
        self._reader = reader
        self._cache = cache

    async def locate(self, catalog_url: str, item_id: str) -> LocateResult:
        """Return the listing page of ``catalog_url`` that links to ``item_id``."""

        cached = self._cache.get_location(item_id)
        if cached is not None:
            return LocateResult.found(cached)

        try:
            async with aclosing(self._walker.iter_pages(catalog_url)) as pages:
                async for page in pages:
                    if self._reader.find_item_link(page.html, item_id):
                        location = CatalogLocation(
                            catalog_url=catalog_url, page_url=page.url
                        )
                        self._cache.remember_location(item_id, location)
                        logger.info(
                            "Located %s on page %s of %s",
                            item_id,
                            page.number,
                            catalog_url,
                        )
                        return LocateResult.found(location)
        except NetworkError as exc:
            logger.warning(
                "Searching %s for %s aborted: %s", catalog_url, item_id, exc
            )
            return LocateResult.failed(str(exc))

        return LocateResult.not_found()

    async def locate_anywhere(
        self, item_id: str, catalogs: Sequence[CatalogRef]
    ) -> LocateResult:
        """Search every known catalog in turn until ``item_id`` turns up."""

        cached = self._cache.get_location(item_id)
        if cached is not None:
            return LocateResult.found(cached)

        errors: list[str] = []
        for catalog in catalogs:
            result = await self.locate(catalog.listing_url, item_id)
            if result.is_found:
                return result
            if result.status == "error" and result.error:
                errors.append(result.error)

        if errors:
            logger.warning(
                "Could not locate %s; %s catalog(s) failed", item_id, len(errors)
            )
            return LocateResult.failed("; ".join(errors))
        logger.info("Item %s not found in %s catalog(s)", item_id, len(catalogs))
        return LocateResult.not_found()
