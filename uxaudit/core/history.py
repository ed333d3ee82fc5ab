import asyncio
import json
import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from uxaudit.core.normalize import normalize_url
from uxaudit.models.schema import HistoryEntry
from uxaudit.storage import Storage

log = logging.getLogger("uxaudit")

_entries_adapter = TypeAdapter(List[HistoryEntry])


class AuditRepository:
    """Ordered audit history (most recent first) backed by one storage slot.

    Every mutation is written through to storage before it returns, so a
    lookup right after ``append``/``clear`` always sees the change.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._entries: List[HistoryEntry] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    async def load(self) -> List[HistoryEntry]:
        raw = await self.storage.read()
        entries: List[HistoryEntry] = []
        if raw:
            try:
                entries = _entries_adapter.validate_python(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as e:
                log.warning("Stored audit history is unreadable, starting empty: %s", e)
                entries = []
        self._entries = entries
        log.info("Loaded %d audit(s) from history", len(entries))
        return list(entries)

    async def persist(self, entries: Sequence[HistoryEntry]) -> None:
        blob = _entries_adapter.dump_json(list(entries), by_alias=True).decode()
        try:
            await self.storage.write(blob)
        except Exception as e:
            log.error("Failed to persist audit history: %s", e)
            raise

    def find_by_url(self, raw_url: str) -> Optional[HistoryEntry]:
        key = normalize_url(raw_url)
        for entry in self._entries:
            if normalize_url(entry.url) == key:
                return entry
        return None

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        return next((e for e in self._entries if e.id == entry_id), None)

    async def append(self, entry: HistoryEntry) -> None:
        async with self._lock:
            self._entries.insert(0, entry)
            await self.persist(self._entries)

    async def clear(self) -> None:
        async with self._lock:
            self._entries = []
            await self.persist(self._entries)
        log.info("Audit history cleared")
