"""In-memory lookup caches shared by the listing and stream services."""

from __future__ import annotations

import logging

from ..models import CatalogLocation, ItemRecord

logger = logging.getLogger(__name__)


class LookupCache:
    """Best-effort ``item id -> location`` and ``item id -> record`` maps.

    Entries are snapshots: writes overwrite, nothing is evicted, and a missing
    entry only means the listings have to be walked again.
    """

    def __init__(self) -> None:
        self._locations: dict[str, CatalogLocation] = {}
        self._records: dict[str, ItemRecord] = {}

    def remember(self, record: ItemRecord, location: CatalogLocation) -> None:
        self._records[record.id] = record
        self._locations[record.id] = location

    def remember_location(self, item_id: str, location: CatalogLocation) -> None:
        self._locations[item_id] = location

    def get_location(self, item_id: str) -> CatalogLocation | None:
        return self._locations.get(item_id)

    def get_record(self, item_id: str) -> ItemRecord | None:
        return self._records.get(item_id)

    def forget_location(self, item_id: str) -> None:
        if self._locations.pop(item_id, None) is not None:
            logger.debug("Dropped stale listing location for %s", item_id)

    def __len__(self) -> int:
        return len(self._records)
