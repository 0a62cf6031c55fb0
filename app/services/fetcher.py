"""HTTP access to the catalog site and the file host."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Mapping

import httpx

from ..config import Settings
from ..errors import NetworkError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FetchResult:
    """Body of a fetched page, or only its URL when it landed on the file host."""

    url: str
    text: str = ""
    file_host: bool = False


class Fetcher:
    """The single point of network I/O, with a bounded retry policy."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client
        self._max_attempts = settings.fetch_retries

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {"User-Agent": self._settings.user_agent}
        if extra:
            headers.update(extra)
        return headers

    def _is_file_host(self, url: httpx.URL | str) -> bool:
        return self._settings.file_host_marker in str(url)

    async def get(self, url: str) -> FetchResult:
        """Fetch ``url`` and return its body, short-circuiting on the file host."""

        response = await self._request("GET", url)
        final_url = str(response.url)
        if self._is_file_host(final_url):
            logger.info("Redirected to file host: %s", final_url)
            return FetchResult(url=final_url, file_host=True)
        return FetchResult(url=final_url, text=response.text)

    async def head(self, url: str) -> str:
        """Return the destination of ``url`` after following redirects.

        The status of the final response is ignored: only the URL matters.
        """

        response = await self._request("HEAD", url, check_status=False)
        return str(response.url)

    async def post_form(
        self,
        url: str,
        data: Mapping[str, str],
        *,
        headers: Mapping[str, str] | None = None,
        retries: int | None = None,
    ) -> httpx.Response:
        """POST an urlencoded form; ``retries`` overrides the attempt bound."""

        return await self._request(
            "POST", url, data=data, headers=headers, attempts=retries
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        attempts: int | None = None,
        check_status: bool = True,
    ) -> httpx.Response:
        max_attempts = attempts if attempts is not None else self._max_attempts
        max_attempts = max(1, max_attempts)
        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._client.request(
                    method,
                    url,
                    data=data,
                    headers=self._headers(headers),
                    follow_redirects=True,
                )
                if check_status and not self._is_file_host(response.url):
                    response.raise_for_status()
                return response
            except (httpx.InvalidURL, ValueError) as exc:
                logger.warning("%s %s has an invalid URL: %s", method, url, exc)
                raise NetworkError(url, attempt, f"{method} {url}: {exc}") from exc
            except httpx.HTTPError as exc:
                logger.warning(
                    "%s %s failed (attempt %s/%s): %s",
                    method,
                    url,
                    attempt,
                    max_attempts,
                    exc,
                )
                if attempt >= max_attempts:
                    raise NetworkError(url, attempt, f"{method} {url}: {exc}") from exc
                backoff = self._backoff(attempt)
                if backoff:
                    await asyncio.sleep(backoff)

    def _backoff(self, attempt: int) -> float:
        base = self._settings.fetch_retry_backoff
        if base <= 0:
            return 0.0
        return min(base * 2 ** (attempt - 1), 5.0)
