"""In-memory stand-in for the catalog site and the file host."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

import httpx

BASE_URL = "https://bhojpuriraas.net"
CATALOG_URL = f"{BASE_URL}/cat/12/new-bhojpuri-movies/1.html"
FILE_HOST_API = "https://eu4.easyupload.io/action.php"

Responder = Callable[[httpx.Request], httpx.Response]


def _key(url: str) -> str:
    return str(httpx.URL(url))


@dataclass
class Movie:
    id: str
    title: str
    section: str = "movies"

    @property
    def href(self) -> str:
        return f"/{self.section}/{self.id}/{self.title.lower().replace(' ', '-')}.html"

    @property
    def poster(self) -> str:
        return f"https://img.bhojpuriraas.net/posters/{self.id}_1.jpg"


def listing_row(title: str | None, href: str | None, poster: str | None) -> str:
    anchor_open = f'<a href="{href}">' if href else "<a>"
    image = f'<img src="{poster}" />' if poster else ""
    title_div = f"<div>{title}</div>" if title is not None else ""
    return (
        '<div class="list">'
        f"{anchor_open}<div><div>{image}</div>{title_div}</div></a>"
        "</div>"
    )


def listing_page(
    movies: Iterable[Movie], *, next_href: str | None = None, extra_rows: str = ""
) -> str:
    rows = "".join(listing_row(movie.title, movie.href, movie.poster) for movie in movies)
    next_link = f'<a href="{next_href}">Next &gt;</a>' if next_href else ""
    return (
        "<html><body>"
        f'<div class="catList">{rows}{extra_rows}</div>'
        f'<div class="pagination">{next_link}</div>'
        "</body></html>"
    )


def home_page(category_href: str = "/categorylist/1.html") -> str:
    return (
        '<html><body><div id="cateogry"><div>'
        '<div><a href="/">Home</a></div>'
        f'<div><a href="{category_href}">Movies</a></div>'
        "</div></div></body></html>"
    )


def category_page(entries: Iterable[tuple[str, str]]) -> str:
    rows = [
        '<div><a href="/header.html">Header</a></div>',
        '<div><a href="/first.html">New Movies</a></div>',
        '<div><a href="/ad.html">Advert</a></div>',
    ]
    # rows 0 and 2 are skipped by the reader, row 1 becomes the first catalog
    rows.extend(f'<div><a href="{href}">{name}</a></div>' for name, href in entries)
    return f'<html><body><div class="catList">{"".join(rows)}</div></body></html>'


def download_listing(qualities: Iterable[tuple[str, str]]) -> str:
    entries = "".join(
        f'<a class="fileName" href="{href}"><div><div>'
        f"<span>{label}</span><span>700 MB</span>"
        "</div></div></a>"
        for label, href in qualities
    )
    return f"<html><body>{entries}</body></html>"


def download_page(redirect_href: str | None) -> str:
    link = f'<a class="dwnLink" href="{redirect_href}">Download</a>' if redirect_href else ""
    return f"<html><body>{link}</body></html>"


@dataclass
class FakeSite:
    """Routes requests by URL (and optionally method) to canned responses."""

    routes: dict[tuple[str | None, str], Responder] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def html(self, url: str, body: str, *, status: int = 200) -> None:
        self.routes[(None, _key(url))] = lambda _: httpx.Response(
            status, text=body, headers={"Content-Type": "text/html"}
        )

    def redirect(self, url: str, location: str) -> None:
        self.routes[(None, _key(url))] = lambda _: httpx.Response(
            302, headers={"Location": location}
        )

    def json(self, url: str, payload: object, *, method: str = "POST") -> None:
        self.routes[(method, _key(url))] = lambda _: httpx.Response(200, json=payload)

    def respond(self, url: str, responder: Responder, *, method: str | None = None) -> None:
        self.routes[(method, _key(url))] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        responder = self.routes.get((request.method, url)) or self.routes.get((None, url))
        if responder is None:
            return httpx.Response(404, text="not found")
        return responder(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def calls(self, url: str, method: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if str(request.url) == _key(url) and (method is None or request.method == method)
        )
