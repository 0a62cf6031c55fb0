"""Paginated walking of catalog listings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable
from urllib.parse import urljoin

from ..config import Settings
from ..models import CatalogLocation, ItemRecord, ItemSummary
from ..utils import item_id_from_href, listing_page_url
from .cache import LookupCache
from .fetcher import Fetcher
from .page_reader import ListingEntry, PageReader

logger = logging.getLogger(__name__)

ItemPredicate = Callable[[ItemRecord], bool]


@dataclass(slots=True)
class ListingPage:
    """One fetched listing page together with the items read from it."""

    number: int
    url: str
    html: str
    items: list[ItemSummary] = field(default_factory=list)
    has_next: bool = False


class ListingWalker:
    """Walks a catalog page by page, recording every item it sees."""

    def __init__(
        self,
        settings: Settings,
        fetcher: Fetcher,
        reader: PageReader,
        cache: LookupCache,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._reader = reader
        self._cache = cache

    @property
    def max_pages(self) -> int:
        return self._settings.max_listing_pages

    async def iter_pages(self, listing_url: str) -> AsyncIterator[ListingPage]:
        """Yield listing pages in order until pagination ends or the cap is hit.

        Raises :class:`~app.errors.NetworkError` if a page cannot be fetched.
        """

        page_number = 1
        while page_number <= self.max_pages:
            page_url = listing_page_url(listing_url, page_number)
            logger.info("Fetching listing page %s: %s", page_number, page_url)
            result = await self._fetcher.get(page_url)
            items = self._read_items(result.text, page_url)
            location = CatalogLocation(catalog_url=listing_url, page_url=page_url)
            for item in items:
                self._cache.remember(ItemRecord.from_summary(item), location)

            has_next = bool(self._reader.find_next_page_link(result.text))
            yield ListingPage(
                number=page_number,
                url=page_url,
                html=result.text,
                items=items,
                has_next=has_next,
            )
            if not has_next:
                break
            page_number += 1

    async def walk(
        self, listing_url: str, match: ItemPredicate | None = None
    ) -> list[ItemSummary]:
        """Collect every item of a catalog, optionally filtered by ``match``.

        The filter never shortens the walk; every page is still visited so the
        lookup cache sees every item.
        """

        collected: list[ItemSummary] = []
        pages = 0
        async for page in self.iter_pages(listing_url):
            pages += 1
            for item in page.items:
                if match is None or match(ItemRecord.from_summary(item)):
                    collected.append(item)
        logger.info(
            "Walked %s page(s) of %s, kept %s item(s)",
            pages,
            listing_url,
            len(collected),
        )
        return collected

    def _read_items(self, html: str, page_url: str) -> list[ItemSummary]:
        items: list[ItemSummary] = []
        for entry in self._reader.find_listing_entries(html):
            summary = self._to_summary(entry, page_url)
            if summary is not None:
                items.append(summary)
        return items

    def _to_summary(self, entry: ListingEntry, page_url: str) -> ItemSummary | None:
        if not (entry.title and entry.href and entry.poster):
            return None
        try:
            item_id = item_id_from_href(entry.href)
            poster_url = urljoin(page_url, entry.poster)
        except ValueError:
            logger.debug("Skipping listing row with malformed link: %r", entry.href)
            return None
        if not item_id:
            return None
        return ItemSummary(id=item_id, title=entry.title, poster_url=poster_url)
