"""Discovery of the site's categories."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from ..config import Settings
from ..errors import ResolutionFailure
from ..models import CatalogRef
from ..utils import normalize_text
from .fetcher import Fetcher
from .page_reader import PageReader

logger = logging.getLogger(__name__)

CATALOG_ID_PREFIX = "bhojpuriraas-"


class CatalogDiscovery:
    """Reads the home page, then the category page, into catalog references."""

    def __init__(self, settings: Settings, fetcher: Fetcher, reader: PageReader):
        self._settings = settings
        self._fetcher = fetcher
        self._reader = reader

    async def discover(self) -> list[CatalogRef]:
        """Return the current catalogs.

        Raises :class:`~app.errors.NetworkError` or
        :class:`~app.errors.ResolutionFailure` when the pages cannot be read.
        """

        base_url = self._settings.base_url
        home = await self._fetcher.get(base_url)
        category_href = self._reader.find_category_link(home.text)
        if not category_href:
            raise ResolutionFailure(f"No category link on {base_url}")

        try:
            category_url = urljoin(base_url, category_href)
        except ValueError as exc:
            raise ResolutionFailure(f"Malformed category link {category_href!r}") from exc
        logger.info("Fetching category page: %s", category_url)
        category_page = await self._fetcher.get(category_url)

        catalogs: list[CatalogRef] = []
        for entry in self._reader.find_catalog_entries(category_page.text):
            try:
                listing_url = urljoin(base_url, entry.href)
            except ValueError:
                logger.warning("Skipping catalog %r with malformed link", entry.name)
                continue
            catalogs.append(
                CatalogRef(
                    id=f"{CATALOG_ID_PREFIX}{entry.index}",
                    name=normalize_text(entry.name),
                    listing_url=listing_url,
                )
            )
        logger.info("Discovered %s catalog(s)", len(catalogs))
        return catalogs
