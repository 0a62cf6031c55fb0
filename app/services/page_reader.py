"""Site-structure knowledge: everything that reads markup lives here."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag


@dataclass(slots=True)
class ListingEntry:
    """Raw fields read from one listing row; any of them may be missing."""

    title: str | None
    href: str | None
    poster: str | None


@dataclass(slots=True)
class QualityEntry:
    label: str
    href: str


@dataclass(slots=True)
class CategoryEntry:
    index: int
    name: str
    href: str


@runtime_checkable
class PageReader(Protocol):
    """Extracts links and listing rows from site pages."""

    def find_category_link(self, html: str) -> str | None: ...

    def find_catalog_entries(self, html: str) -> list[CategoryEntry]: ...

    def find_listing_entries(self, html: str) -> list[ListingEntry]: ...

    def find_next_page_link(self, html: str) -> str | None: ...

    def find_item_link(self, html: str, item_id: str) -> str | None: ...

    def find_quality_entries(self, html: str) -> list[QualityEntry]: ...

    def find_redirect_link(self, html: str) -> str | None: ...


class BhojpuriRaasPageReader:
    """CSS selectors for the bhojpuriraas.net page layout."""

    CATEGORY_LINK = "#cateogry > div > div:nth-child(2) a"
    LISTING = ".catList"
    LISTING_TITLE = "a > div > div:nth-child(2)"
    NEXT_PAGE = 'a:-soup-contains("Next >")'
    QUALITY_ENTRY = ".fileName"
    QUALITY_LABEL = "div div span:first-child"
    REDIRECT_LINK = ".dwnLink"
    # Category page rows 0 and 2 are not catalogs.
    SKIPPED_CATEGORY_ROWS = frozenset({0, 2})

    @staticmethod
    def _soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html or "", "html.parser")

    @staticmethod
    def _href(element: Tag | None) -> str | None:
        if element is None:
            return None
        href = element.get("href")
        if isinstance(href, list):
            href = href[0] if href else None
        if not href:
            return None
        return str(href).strip() or None

    def _listing_rows(self, soup: BeautifulSoup) -> list[Tag]:
        container = soup.select_one(self.LISTING)
        if container is None:
            return []
        return [child for child in container.children if isinstance(child, Tag)]

    def find_category_link(self, html: str) -> str | None:
        return self._href(self._soup(html).select_one(self.CATEGORY_LINK))

    def find_catalog_entries(self, html: str) -> list[CategoryEntry]:
        rows = [
            row
            for position, row in enumerate(self._listing_rows(self._soup(html)))
            if position not in self.SKIPPED_CATEGORY_ROWS
        ]
        entries: list[CategoryEntry] = []
        for index, row in enumerate(rows):
            anchor = row.find("a")
            if not isinstance(anchor, Tag):
                continue
            name = anchor.get_text(strip=True)
            href = self._href(anchor)
            if name and href:
                entries.append(CategoryEntry(index=index, name=name, href=href))
        return entries

    def find_listing_entries(self, html: str) -> list[ListingEntry]:
        entries: list[ListingEntry] = []
        for row in self._listing_rows(self._soup(html)):
            title_node = row.select_one(self.LISTING_TITLE)
            anchor = row.find("a")
            image = row.find("img")
            poster = image.get("src") if isinstance(image, Tag) else None
            entries.append(
                ListingEntry(
                    title=title_node.get_text(strip=True) if title_node else None,
                    href=self._href(anchor) if isinstance(anchor, Tag) else None,
                    poster=str(poster).strip() if poster else None,
                )
            )
        return entries

    def find_next_page_link(self, html: str) -> str | None:
        return self._href(self._soup(html).select_one(self.NEXT_PAGE))

    def find_item_link(self, html: str, item_id: str) -> str | None:
        container = self._soup(html).select_one(self.LISTING)
        if container is None:
            return None
        needle = f"/{item_id}/"
        for anchor in container.find_all("a"):
            href = self._href(anchor)
            if href and needle in href:
                return href
        return None

    def find_quality_entries(self, html: str) -> list[QualityEntry]:
        entries: list[QualityEntry] = []
        for element in self._soup(html).select(self.QUALITY_ENTRY):
            href = self._href(element)
            if not href:
                continue
            label_node = element.select_one(self.QUALITY_LABEL)
            label = label_node.get_text(strip=True) if label_node else ""
            entries.append(QualityEntry(label=label, href=href))
        return entries

    def find_redirect_link(self, html: str) -> str | None:
        return self._href(self._soup(html).select_one(self.REDIRECT_LINK))
