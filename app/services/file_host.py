"""Client for the file host's download-token API."""

from __future__ import annotations

import logging
from typing import Any

from ..config import Settings
from ..errors import ApiError, NetworkError
from .fetcher import Fetcher

logger = logging.getLogger(__name__)


class FileHostClient:
    """Exchanges a file-host file id for a direct download link."""

    def __init__(self, settings: Settings, fetcher: Fetcher):
        self._settings = settings
        self._fetcher = fetcher

    def _form(self, file_id: str) -> dict[str, str]:
        return {
            "type": "download-token",
            "url": file_id,
            "value": "",
            "captchatoken": self._settings.file_host_captcha_token,
            "method": "regular",
        }

    def _headers(self, file_id: str) -> dict[str, str]:
        origin = self._settings.file_host_origin
        return {
            "Content-Type": "application/x-www-form-urlencoded",
            "Origin": origin,
            "Referer": f"{origin}/{file_id}",
        }

    async def exchange(self, file_id: str) -> str | None:
        """Return the direct link for ``file_id`` or ``None`` if the API refuses."""

        logger.info("Requesting download token for file %s", file_id)
        try:
            response = await self._fetcher.post_form(
                self._settings.file_host_api_url,
                self._form(file_id),
                headers=self._headers(file_id),
                retries=1,
            )
            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError("Unexpected API response format") from exc
            return self._extract_link(payload)
        except (ApiError, NetworkError) as exc:
            logger.warning("Download token request for %s failed: %s", file_id, exc)
            return None

    @staticmethod
    def _extract_link(payload: Any) -> str:
        if not isinstance(payload, dict):
            raise ApiError("Unexpected API response format")
        link = payload.get("download_link")
        if payload.get("status") and isinstance(link, str) and link.strip():
            return link.strip()
        if payload.get("error"):
            raise ApiError(f"API error: {payload['error']}")
        raise ApiError("Unexpected API response format")
