"""Pydantic models describing catalog, item and stream payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .utils import normalize_poster_url, normalize_text

META_ID_PREFIX = "bhojpuriraas"


def build_meta_id(item_id: str) -> str:
    return f"{META_ID_PREFIX}:{item_id}"


def parse_meta_id(meta_id: str) -> str | None:
    """Return the bare item id from a Stremio meta id, if it is one of ours."""

    prefix, separator, item_id = meta_id.partition(":")
    if prefix != META_ID_PREFIX or not separator:
        return None
    item_id = item_id.strip()
    return item_id or None


class CatalogRef(BaseModel):
    """A category discovered on the site."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    listing_url: str

    def to_manifest_entry(self) -> dict[str, object]:
        return {
            "type": "movie",
            "id": self.id,
            "name": self.name,
            "extra": [{"name": "search"}],
        }


class ItemSummary(BaseModel):
    """One row of a catalog listing page."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    poster_url: str = Field(min_length=1)


class ItemRecord(BaseModel):
    """Display-ready form of an :class:`ItemSummary`."""

    id: str
    title: str
    poster_url: str
    description: str
    runtime: str = "120 min"
    language: str = "Bhojpuri"
    country: str = "IN"
    genres: list[str] = Field(default_factory=lambda: ["Bhojpuri"])

    @classmethod
    def from_summary(cls, summary: ItemSummary) -> "ItemRecord":
        title = normalize_text(summary.title)
        return cls(
            id=summary.id,
            title=title,
            poster_url=normalize_poster_url(summary.poster_url),
            description=title,
        )

    @property
    def meta_id(self) -> str:
        return build_meta_id(self.id)

    def to_meta(self) -> dict[str, object]:
        """Return a Stremio-compatible meta object."""

        return {
            "id": self.meta_id,
            "type": "movie",
            "name": self.title,
            "poster": self.poster_url,
            "background": self.poster_url,
            "logo": self.poster_url,
            "description": self.description,
            "runtime": self.runtime,
            "language": self.language,
            "country": self.country,
            "genres": list(self.genres),
        }


class StreamCandidate(BaseModel):
    """One resolvable rendition of an item."""

    model_config = ConfigDict(frozen=True)

    quality_label: str
    resolved_url: str

    def to_stream(self, meta_id: str, item_title: str | None = None) -> dict[str, object]:
        """Return a Stremio stream object for this rendition."""

        label = self.quality_label or "Unknown"
        title = f"{item_title} - {label}" if item_title else label
        return {
            "url": self.resolved_url,
            "name": f"BhojpuriRaas - {label}",
            "title": title,
            "behaviorHints": {
                "notWebReady": True,
                "bingeGroup": f"bhojpuri-{meta_id}",
            },
        }


class CatalogLocation(BaseModel):
    """Where an item was last seen: its catalog and the listing page."""

    model_config = ConfigDict(frozen=True)

    catalog_url: str
    page_url: str


class LocateResult(BaseModel):
    """Outcome of looking an item up inside the paginated listings."""

    status: Literal["found", "not_found", "error"]
    location: CatalogLocation | None = None
    error: str | None = None

    @classmethod
    def found(cls, location: CatalogLocation) -> "LocateResult":
        return cls(status="found", location=location)

    @classmethod
    def not_found(cls) -> "LocateResult":
        return cls(status="not_found")

    @classmethod
    def failed(cls, error: str) -> "LocateResult":
        return cls(status="error", error=error)

    @property
    def is_found(self) -> bool:
        return self.status == "found" and self.location is not None
