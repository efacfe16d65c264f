"""Whole-collection JSON persistence of the four record collections."""

import json
import logging
from typing import Any, Optional

from ..config import settings
from ..errors import CapabilityUnavailableError, StoreCorruptionError
from ..models.backup import DeleteResult, MergeCounts
from ..models.records import ALL_KINDS, RecordKind
from ..stores import BaseKVBackend, get_backend
from .media_storage import delete_file

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class MetadataStore:
    """Read-modify-write access to record collections.

    Every mutation reads the full collection, changes it in memory and
    writes it back with a single `set_item`. Backend errors propagate.
    """

    def __init__(self, backend: BaseKVBackend):
        self.backend = backend

    async def get_collection(self, kind: RecordKind) -> list[Record]:
        raw = await self.backend.get_item(kind.storage_key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreCorruptionError(kind.storage_key, str(e)) from e
        if not isinstance(records, list):
            raise StoreCorruptionError(kind.storage_key, f"expected a JSON array, got {type(records).__name__}")
        return records

    async def save_collection(self, kind: RecordKind, records: list[Record]) -> None:
        payload = json.dumps(records, ensure_ascii=False)
        await self.backend.set_item(kind.storage_key, payload)
        logger.debug(f"Saved {len(records)} records to {kind.value}")

    async def get(self, kind: RecordKind, record_id: str) -> Optional[Record]:
        records = await self.get_collection(kind)
        return next((r for r in records if r.get("id") == record_id), None)

    async def upsert(self, kind: RecordKind, record: Record) -> list[Record]:
        if not record.get("id"):
            raise ValueError(f"Cannot upsert a {kind.value} record without an id")
        records = await self.get_collection(kind)
        replaced = False
        updated = []
        for r in records:
            if r.get("id") != record["id"]:
                updated.append(r)
            elif not replaced:
                updated.append(record)
                replaced = True
        if not replaced:
            updated.append(record)
        await self.save_collection(kind, updated)
        return updated

    async def update(self, kind: RecordKind, record_id: str, patch: Record) -> Optional[Record]:
        """Shallow-merge `patch` over the stored record. No-op if missing."""
        records = await self.get_collection(kind)
        for i, r in enumerate(records):
            if r.get("id") == record_id:
                merged = {**r, **patch, "id": record_id}
                records[i] = merged
                await self.save_collection(kind, records)
                return merged
        return None

    async def delete(self, kind: RecordKind, record_id: str) -> DeleteResult:
        records = await self.get_collection(kind)
        target = next((r for r in records if r.get("id") == record_id), None)
        if target is None:
            return DeleteResult(deleted=False)

        await self.save_collection(kind, [r for r in records if r.get("id") != record_id])

        result = DeleteResult(deleted=True)
        file_deleted, warning = delete_file(target.get(kind.file_field))
        result.file_deleted = file_deleted
        if warning:
            result.warnings.append(warning)
        return result

    async def merge_collection(self, kind: RecordKind, incoming: list[Record]) -> MergeCounts:
        """Merge records by id: an incoming record replaces a stored one with
        the same id, anything else is appended. Stored duplicates of an id
        are collapsed to the first occurrence."""
        if any(not r.get("id") for r in incoming):
            raise ValueError(f"Cannot merge {kind.value} records without an id")
        records: list[Record] = []
        index: dict[str, int] = {}
        for r in await self.get_collection(kind):
            record_id = r.get("id")
            if record_id:
                if record_id in index:
                    continue
                index[record_id] = len(records)
            records.append(r)
        counts = MergeCounts()
        for record in incoming:
            record_id = record.get("id")
            if record_id in index:
                records[index[record_id]] = record
                counts.replaced += 1
            else:
                index[record_id] = len(records)
                records.append(record)
                counts.added += 1
        await self.save_collection(kind, records)
        return counts

    async def snapshot(self) -> dict[RecordKind, list[Record]]:
        return {kind: await self.get_collection(kind) for kind in ALL_KINDS}

    async def counts(self) -> dict[str, int]:
        snapshot = await self.snapshot()
        return {kind.value: len(records) for kind, records in snapshot.items()}


_store: Optional[MetadataStore] = None


def get_metadata_store() -> MetadataStore:
    global _store
    if _store is None:
        backend = get_backend(settings.store_backend)
        if backend is None:
            raise CapabilityUnavailableError(f"Unknown store backend: {settings.store_backend}")
        _store = MetadataStore(backend)
    return _store


def set_metadata_store(store: Optional[MetadataStore]) -> None:
    global _store
    _store = store
