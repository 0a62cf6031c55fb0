"""Resolution of an item into playable stream URLs."""

from __future__ import annotations

import logging
import re
from typing import Sequence
from urllib.parse import urljoin

from ..config import Settings
from ..errors import ApiError, ResolutionFailure, ResolverError
from ..models import CatalogLocation, CatalogRef, StreamCandidate
from ..utils import last_path_segment, section_from_href
from .cache import LookupCache
from .fetcher import Fetcher
from .file_host import FileHostClient
from .locator import ItemLocator
from .page_reader import PageReader, QualityEntry

logger = logging.getLogger(__name__)

DOWNLOAD_LISTING_PATH = "/{section}/fl/{item_id}/1.html"
FILE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class StreamResolver:
    """Walks download page, redirect and file host for every quality of an item."""

    def __init__(
        self,
        settings: Settings,
        fetcher: Fetcher,
        reader: PageReader,
        locator: ItemLocator,
        file_host: FileHostClient,
        cache: LookupCache,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._reader = reader
        self._locator = locator
        self._file_host = file_host
        self._cache = cache

    async def resolve(
        self, item_id: str, catalogs: Sequence[CatalogRef]
    ) -> list[StreamCandidate]:
        """Return every quality of ``item_id`` that resolved, in page order."""

        try:
            download_listing_url = await self._download_listing_url(item_id, catalogs)
            if download_listing_url is None:
                return []
            logger.info("Fetching download listing: %s", download_listing_url)
            listing = await self._fetcher.get(download_listing_url)
            qualities = self._reader.find_quality_entries(listing.text)
        except ResolverError as exc:
            logger.warning("Stream lookup for %s failed: %s", item_id, exc)
            return []

        candidates: list[StreamCandidate] = []
        for quality in qualities:
            try:
                url = await self._resolve_quality(quality)
            except ResolverError as exc:
                logger.warning(
                    "Skipping quality %r of %s: %s", quality.label, item_id, exc
                )
                continue
            logger.info("Resolved %s (%s): %s", item_id, quality.label, url)
            candidates.append(StreamCandidate(quality_label=quality.label, resolved_url=url))

        if not candidates:
            logger.warning("No streams found for %s", item_id)
        else:
            logger.info("Found %s stream(s) for %s", len(candidates), item_id)
        return candidates

    async def _download_listing_url(
        self, item_id: str, catalogs: Sequence[CatalogRef]
    ) -> str | None:
        result = await self._locator.locate_anywhere(item_id, catalogs)
        if not result.is_found or result.location is None:
            logger.warning("Could not find a listing page for %s", item_id)
            return None

        href = await self._item_href(result.location, item_id)
        if href is None:
            # The cached page may be stale: forget it and search once more.
            self._cache.forget_location(item_id)
            result = await self._locator.locate_anywhere(item_id, catalogs)
            if not result.is_found or result.location is None:
                return None
            href = await self._item_href(result.location, item_id)
            if href is None:
                return None

        try:
            section = section_from_href(href)
        except ValueError:
            section = None
        if section is None:
            raise ResolutionFailure(f"Detail link {href!r} has no path section")
        path = DOWNLOAD_LISTING_PATH.format(section=section, item_id=item_id)
        return f"{self._settings.base_url}{path}"

    async def _item_href(self, location: CatalogLocation, item_id: str) -> str | None:
        logger.info("Fetching %s from listing page %s", item_id, location.page_url)
        page = await self._fetcher.get(location.page_url)
        return self._reader.find_item_link(page.text, item_id)

    async def _resolve_quality(self, quality: QualityEntry) -> str:
        download_page_url = self._absolute_url(quality.href)
        logger.info("Fetching download page: %s", download_page_url)
        download_page = await self._fetcher.get(download_page_url)
        redirect_href = self._reader.find_redirect_link(download_page.text)
        if not redirect_href:
            raise ResolutionFailure(f"No download link on {download_page_url}")

        redirect_url = self._absolute_url(redirect_href)
        logger.info("Following redirect URL: %s", redirect_url)
        destination = await self._fetcher.head(redirect_url)
        if self._is_media_file(destination):
            logger.info("Found direct download link: %s", destination)
            return destination

        landing = await self._fetcher.get(redirect_url)
        if not landing.file_host:
            raise ResolutionFailure(f"{redirect_url} did not lead to the file host")
        file_id = last_path_segment(landing.url)
        if not FILE_ID_RE.match(file_id):
            raise ResolutionFailure(f"No file id in file-host URL {landing.url}")

        direct_link = await self._file_host.exchange(file_id)
        if not direct_link:
            raise ApiError(f"Token exchange for file {file_id} failed")
        return direct_link

    def _absolute_url(self, href: str) -> str:
        try:
            return urljoin(self._settings.base_url, href)
        except ValueError as exc:
            raise ResolutionFailure(f"Malformed link {href!r}: {exc}") from exc

    def _is_media_file(self, url: str) -> bool:
        lowered = url.lower()
        return any(extension in lowered for extension in self._settings.media_extensions)
