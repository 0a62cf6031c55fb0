"""Exceptions raised inside the resolution pipeline."""

from __future__ import annotations


class ResolverError(Exception):
    """Base class for every failure the add-on knows how to absorb."""


class NetworkError(ResolverError):
    """Raised by the fetcher once every attempt for a URL has failed."""

    def __init__(self, url: str, attempts: int, message: str | None = None):
        self.url = url
        self.attempts = attempts
        super().__init__(
            message or f"Failed to fetch {url} after {attempts} attempt(s)"
        )


class ResolutionFailure(ResolverError):
    """A hop in the download chain did not produce what the next hop needs."""


class ApiError(ResolverError):
    """The file-host API answered with an error or an unexpected payload."""
