"""Tests for locating an item within paginated catalog listings."""

from __future__ import annotations

import pytest

from app.config import Settings
from app.models import CatalogRef
from app.services.cache import LookupCache
from app.services.fetcher import Fetcher
from app.services.listing import ListingWalker
from app.services.locator import ItemLocator
from app.services.page_reader import BhojpuriRaasPageReader
from app.utils import listing_page_url
from fake_site import BASE_URL, CATALOG_URL, FakeSite, Movie, listing_page


def build_locator(settings: Settings, http_client, cache: LookupCache) -> ItemLocator:
    reader = BhojpuriRaasPageReader()
    walker = ListingWalker(settings, Fetcher(settings, http_client), reader, cache)
    return ItemLocator(walker, reader, cache)


def paginated_site(pages: int, target_page: int, target: Movie) -> FakeSite:
    site = FakeSite()
    for number in range(1, pages + 1):
        movies = [Movie(str(600 + number), f"Filler {number}")]
        if number == target_page:
            movies.append(target)
        next_href = listing_page_url(CATALOG_URL, number + 1) if number < pages else None
        site.html(listing_page_url(CATALOG_URL, number), listing_page(movies, next_href=next_href))
    return site


@pytest.mark.anyio
async def test_locate_stops_at_first_matching_page(settings: Settings) -> None:
    target = Movie("7001", "Target Movie")
    site = paginated_site(pages=5, target_page=2, target=target)

    async with site.client() as http_client:
        result = await build_locator(settings, http_client, LookupCache()).locate(
            CATALOG_URL, "7001"
        )

    assert result.status == "found"
    assert result.location is not None
    assert result.location.page_url == listing_page_url(CATALOG_URL, 2)
    assert result.location.catalog_url == CATALOG_URL
    assert len(site.requests) == 2


@pytest.mark.anyio
async def test_locate_is_idempotent_with_warm_cache(settings: Settings) -> None:
    """A second lookup is answered from the cache without fetching pages."""

    target = Movie("7002", "Cached Movie")
    site = paginated_site(pages=3, target_page=3, target=target)
    cache = LookupCache()

    async with site.client() as http_client:
        locator = build_locator(settings, http_client, cache)
        first = await locator.locate(CATALOG_URL, "7002")
        fetches_after_first = len(site.requests)
        second = await locator.locate(CATALOG_URL, "7002")

    assert first.location == second.location
    assert len(site.requests) == fetches_after_first == 3


@pytest.mark.anyio
async def test_locate_reports_not_found_as_result(settings: Settings) -> None:
    site = paginated_site(pages=2, target_page=0, target=Movie("0", "unused"))

    async with site.client() as http_client:
        result = await build_locator(settings, http_client, LookupCache()).locate(
            CATALOG_URL, "9999"
        )

    assert result.status == "not_found"
    assert result.location is None
    assert len(site.requests) == 2


@pytest.mark.anyio
async def test_locate_respects_page_cap(settings: Settings) -> None:
    target = Movie("7003", "Too Deep")
    site = paginated_site(pages=12, target_page=10, target=target)

    async with site.client() as http_client:
        result = await build_locator(settings, http_client, LookupCache()).locate(
            CATALOG_URL, "7003"
        )

    assert result.status == "not_found"
    assert len(site.requests) == 8


@pytest.mark.anyio
async def test_locate_turns_network_failure_into_error_result(settings: Settings) -> None:
    site = FakeSite()

    async with site.client() as http_client:
        result = await build_locator(settings, http_client, LookupCache()).locate(
            CATALOG_URL, "7004"
        )

    assert result.status == "error"
    assert result.error


@pytest.mark.anyio
async def test_locate_anywhere_searches_each_catalog(settings: Settings) -> None:
    other_catalog = f"{BASE_URL}/cat/15/old-movies/1.html"
    target = Movie("7005", "Old Classic")
    site = FakeSite()
    site.html(CATALOG_URL, listing_page([Movie("7100", "Somewhere Else")]))
    site.html(other_catalog, listing_page([target]))
    catalogs = [
        CatalogRef(id="bhojpuriraas-0", name="New", listing_url=CATALOG_URL),
        CatalogRef(id="bhojpuriraas-1", name="Old", listing_url=other_catalog),
    ]

    async with site.client() as http_client:
        result = await build_locator(settings, http_client, LookupCache()).locate_anywhere(
            "7005", catalogs
        )

    assert result.is_found
    assert result.location is not None
    assert result.location.catalog_url == other_catalog


@pytest.mark.anyio
async def test_locate_anywhere_skips_failing_catalogs(settings: Settings) -> None:
    broken_catalog = f"{BASE_URL}/cat/99/broken/1.html"
    target = Movie("7006", "Survivor")
    site = FakeSite()
    site.html(CATALOG_URL, listing_page([target]))
    catalogs = [
        CatalogRef(id="bhojpuriraas-0", name="Broken", listing_url=broken_catalog),
        CatalogRef(id="bhojpuriraas-1", name="New", listing_url=CATALOG_URL),
    ]

    async with site.client() as http_client:
        result = await build_locator(settings, http_client, LookupCache()).locate_anywhere(
            "7006", catalogs
        )

    assert result.is_found
    assert site.calls(broken_catalog) == 3
