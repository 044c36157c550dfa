"""Content-addressed cache for generated reports.

Records live under ``{prefix}{id}``; a single index key holds the listing,
newest first. The store has no transactions, so writes are ordered to keep one
crash-consistency rule: an index entry may outlive its record (read as a miss
and dropped by ``heal``), but a record is never written before its index
entry. Deletes and evictions remove records before index entries for the
same reason.

A failed cache write never reaches the caller. When the store is full the
oldest reports are evicted and the save is retried once; if that fails too the
report is simply not cached.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from cosmic_core.exceptions import StoreError, StoreQuotaExceededError
from cosmic_core.schemas.reports import ReportMeta, ReportRecord
from cosmic_core.store.durable_store import DurableStore
from cosmic_core.utils.fingerprint import FormInput, fingerprint
from cosmic_core.utils.logger import get_logger

log = get_logger(__name__)

Generator = Callable[[str, Mapping[str, Any]], Awaitable[Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportCache:
    """Saves, lists and evicts reports in the device store."""

    def __init__(
        self,
        store: DurableStore,
        prefix: str = "cosmicjyoti_report_",
        index_key: str = "cosmicjyoti_reportindex",
        max_entries: int = 100,
        eviction_floor: int = 5,
        eviction_batch: int = 10,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if index_key.startswith(prefix):
            raise ValueError("index key must not share the record prefix")
        self.store = store
        self.prefix = prefix
        self.index_key = index_key
        self.max_entries = max_entries
        self.eviction_floor = eviction_floor
        self.eviction_batch = eviction_batch
        self._clock = clock
        self._healed = False

    def _record_key(self, report_id: str) -> str:
        return self.prefix + report_id

    def _new_id(self, report_type: str) -> str:
        millis = int(self._clock().timestamp() * 1000)
        return f"{report_type}_{millis}_{uuid.uuid4().hex[:6]}"

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    async def _load_index(self) -> list[ReportMeta]:
        raw = await self.store.get_json(self.index_key)
        if not isinstance(raw, list):
            if raw is not None:
                log.warning("report index is not a list, ignoring", kind=type(raw).__name__)
            return []
        index = []
        for entry in raw:
            try:
                index.append(ReportMeta.model_validate(entry))
            except ValidationError:
                log.warning("dropping malformed index entry")
        return index

    async def _save_index(self, index: list[ReportMeta]) -> None:
        await self.store.set_json(self.index_key, [m.model_dump(mode="json") for m in index])

    async def _remove_records(self, report_ids: list[str]) -> None:
        for report_id in report_ids:
            try:
                await self.store.remove(self._record_key(report_id))
            except StoreError:
                log.warning("failed to remove report record", report_id=report_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _write(self, meta: ReportMeta, payload: Any) -> None:
        index = [m for m in await self._load_index() if m.id != meta.id]
        index.insert(0, meta)
        overflow = [m.id for m in index[self.max_entries :]]
        del index[self.max_entries :]

        await self._save_index(index)
        record = ReportRecord[Any](meta=meta, payload=payload)
        await self.store.set_json(self._record_key(meta.id), record.model_dump(mode="json"))

        if overflow:
            await self._remove_records(overflow)
            log.debug("report index capped", dropped=len(overflow))

    async def _evict_oldest(self, keep_id: str) -> int:
        """Remove the oldest reports (never ``keep_id``). Returns how many went."""
        index = await self._load_index()
        # The report being saved never counts toward the floor
        others = [m.id for m in index if m.id != keep_id]
        if len(others) <= self.eviction_floor:
            return 0

        victims = others[-self.eviction_batch :]

        await self._remove_records(victims)
        gone = set(victims)
        try:
            await self._save_index([m for m in index if m.id not in gone])
        except StoreError:
            # Records are gone already; leftover entries read as misses
            log.warning("failed to save index after eviction", evicted=len(victims))
        log.info("evicted oldest reports", evicted=len(victims), remaining=len(index) - len(gone))
        return len(victims)

    async def _drop_stale_entry(self, report_id: str) -> None:
        if await self.store.get(self._record_key(report_id)) is not None:
            return
        index = await self._load_index()
        pruned = [m for m in index if m.id != report_id]
        if len(pruned) == len(index):
            return
        try:
            await self._save_index(pruned)
        except StoreError:
            log.warning("failed to drop stale index entry", report_id=report_id)

    async def save(
        self,
        report_type: str,
        payload: Any,
        form_input: Optional[FormInput] = None,
        title: Optional[str] = None,
    ) -> str:
        """Save a report and return its id. Never raises for storage reasons."""
        report_type = str(report_type)
        if form_input is not None:
            report_id = fingerprint(report_type, form_input)
        else:
            report_id = self._new_id(report_type)
        meta = ReportMeta(
            id=report_id,
            type=report_type,
            title=title or f"{report_type} report",
            created_at=self._clock(),
            form_input=dict(form_input) if form_input is not None else None,
        )

        try:
            await self._write(meta, payload)
            log.debug("report saved", report_id=report_id, type=report_type)
            return report_id
        except StoreQuotaExceededError:
            log.info("report cache full", report_id=report_id)
        except StoreError as e:
            log.warning("report save failed", report_id=report_id, error=e.message)
            await self._drop_stale_entry(report_id)
            return report_id

        if await self._evict_oldest(keep_id=report_id):
            try:
                await self._write(meta, payload)
                log.info("report saved after eviction", report_id=report_id)
                return report_id
            except StoreError as e:
                log.warning("report save failed after eviction", report_id=report_id, error=e.message)
        else:
            log.warning("report cache full and nothing to evict", report_id=report_id)

        await self._drop_stale_entry(report_id)
        return report_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, report_id: str) -> Optional[ReportRecord[Any]]:
        """Look up a record directly; the index is not consulted."""
        raw = await self.store.get_json(self._record_key(report_id))
        if raw is None:
            return None
        try:
            return ReportRecord[Any].model_validate(raw)
        except ValidationError:
            log.warning("malformed report record", report_id=report_id)
            return None

    async def get_by_form(
        self, report_type: str, form_input: Optional[FormInput]
    ) -> Optional[ReportRecord[Any]]:
        """Return the report previously generated for this exact input, if any."""
        if form_input is None:
            return None
        return await self.get(fingerprint(str(report_type), form_input))

    async def get_or_generate(
        self,
        report_type: str,
        form_input: FormInput,
        generate: Generator,
        title: Optional[str] = None,
    ) -> Any:
        """Cached payload for ``form_input``, generating and saving it on a miss."""
        cached = await self.get_by_form(report_type, form_input)
        if cached is not None:
            log.debug("report cache hit", report_id=cached.meta.id)
            return cached.payload

        payload = await generate(str(report_type), form_input)
        await self.save(report_type, payload, form_input=form_input, title=title)
        return payload

    async def list(self, report_type: Optional[str] = None) -> list[ReportMeta]:
        """Saved reports, newest first, optionally of one type."""
        if not self._healed:
            await self.heal()
        index = await self._load_index()
        if report_type is None:
            return index
        return [m for m in index if m.type == str(report_type)]

    # ------------------------------------------------------------------
    # Deletes and maintenance
    # ------------------------------------------------------------------

    async def delete(self, report_id: str) -> None:
        await self._remove_records([report_id])
        index = await self._load_index()
        pruned = [m for m in index if m.id != report_id]
        if len(pruned) == len(index):
            return
        try:
            await self._save_index(pruned)
        except StoreError:
            log.warning("failed to remove report from index", report_id=report_id)

    async def heal(self) -> int:
        """Drop index entries without records and records without index entries.

        Returns the number of repairs made.
        """
        self._healed = True
        index = await self._load_index()
        record_keys = set(await self.store.keys(self.prefix))

        kept = [m for m in index if self._record_key(m.id) in record_keys]
        repairs = len(index) - len(kept)
        if repairs:
            try:
                await self._save_index(kept)
            except StoreError:
                log.warning("failed to save healed index")

        indexed = {self._record_key(m.id) for m in kept}
        orphans = [key[len(self.prefix) :] for key in record_keys - indexed]
        await self._remove_records(orphans)
        repairs += len(orphans)

        if repairs:
            log.info("report cache healed", stale_entries=len(index) - len(kept), orphans=len(orphans))
        return repairs

    async def clear(self) -> None:
        """Remove every saved report."""
        report_ids = [key[len(self.prefix) :] for key in await self.store.keys(self.prefix)]
        await self._remove_records(report_ids)
        try:
            await self.store.remove(self.index_key)
        except StoreError:
            log.warning("failed to remove report index")
