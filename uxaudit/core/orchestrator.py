import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Protocol

from uxaudit import config
from uxaudit.core.history import AuditRepository
from uxaudit.core.normalize import normalize_url
from uxaudit.models.schema import AuditResult, HistoryEntry

log = logging.getLogger("uxaudit")


class Auditor(Protocol):
    async def request_audit(self, url: str) -> AuditResult: ...


@dataclass(frozen=True)
class AuditOutcome:
    result: AuditResult
    entry: HistoryEntry
    cached: bool


def now_ms() -> int:
    return int(time.time() * 1000)


class AuditOrchestrator:
    """Runs one audit: reuse a stored audit of the same site, or ask the AI.

    States: idle -> checking -> (cache hit | calling) -> (succeeded | failed).
    ``state`` holds the last state reached. Requests for the same site are
    serialized, so a repeat request for a site that is still being audited
    waits and then hits the cache; different sites run side by side.
    """

    def __init__(
        self,
        repository: AuditRepository,
        auditor: Auditor,
        cache_hit_delay: float = config.CACHE_HIT_DELAY,
        clock: Callable[[], int] = now_ms,
        new_id: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.repository = repository
        self.auditor = auditor
        self.cache_hit_delay = cache_hit_delay
        self.clock = clock
        self.new_id = new_id
        self.state = "idle"
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    async def run_audit(self, raw_url: str) -> AuditOutcome:
        key = normalize_url(raw_url)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                outcome = await self._run(raw_url)
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

        if outcome.cached:
            # keep perceived latency consistent with a fresh audit
            if self.cache_hit_delay > 0:
                await asyncio.sleep(self.cache_hit_delay)
            self.state = "succeeded"
        return outcome

    async def _run(self, raw_url: str) -> AuditOutcome:
        self.state = "checking"
        existing = self.repository.find_by_url(raw_url)
        if existing:
            self.state = "cache_hit"
            log.info("Returning stored audit %s for %s", existing.id, raw_url)
            return AuditOutcome(result=existing.result, entry=existing, cached=True)

        self.state = "calling"
        log.info("Audit requested for: %s", raw_url)
        try:
            result = await self.auditor.request_audit(raw_url)
        except Exception:
            self.state = "failed"
            raise

        entry = HistoryEntry(id=self.new_id(), url=raw_url, timestamp=self.clock(), result=result)
        await self.repository.append(entry)
        self.state = "succeeded"
        log.debug("Stored audit %s", entry.id)
        return AuditOutcome(result=result, entry=entry, cached=False)
