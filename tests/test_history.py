import json

import pytest

from conftest import make_entry
from uxaudit.core.history import AuditRepository
from uxaudit.storage import MemoryStorage


class BrokenStorage(MemoryStorage):
    async def write(self, blob: str) -> None:
        raise ConnectionError("slot unavailable")


@pytest.mark.anyio
async def test_load_missing_slot_starts_empty() -> None:
    repo = AuditRepository(MemoryStorage())
    assert await repo.load() == []
    assert len(repo) == 0


@pytest.mark.anyio
@pytest.mark.parametrize("blob", ["{not json", "null", '{"a": 1}', '[{"id": "x"}]'])
async def test_load_unparsable_slot_starts_empty(blob: str) -> None:
    repo = AuditRepository(MemoryStorage(blob))
    assert await repo.load() == []
    assert repo.entries == ()


@pytest.mark.anyio
async def test_append_prepends_and_persists() -> None:
    storage = MemoryStorage()
    repo = AuditRepository(storage)
    await repo.append(make_entry("a.com", "1"))
    await repo.append(make_entry("b.com", "2"))

    assert [e.id for e in repo.entries] == ["2", "1"]
    assert storage.writes == 2
    stored = json.loads(storage.blob)
    assert [e["id"] for e in stored] == ["2", "1"]
    assert stored[0]["result"]["summary"]["targetAudience"]
    assert "whyItMatters" in stored[0]["result"]["problems"][0]


@pytest.mark.anyio
async def test_persisted_history_survives_reload() -> None:
    storage = MemoryStorage()
    repo = AuditRepository(storage)
    await repo.append(make_entry("https://stripe.com", "1"))

    fresh = AuditRepository(storage)
    loaded = await fresh.load()
    assert loaded == list(repo.entries)
    assert fresh.find_by_url("stripe.com").id == "1"


@pytest.mark.anyio
async def test_find_by_url_matches_any_equivalent_form() -> None:
    repo = AuditRepository(MemoryStorage())
    entry = make_entry("https://www.Stripe.com/", "1")
    await repo.append(entry)

    for query in ("stripe.com", "http://stripe.com", "WWW.STRIPE.COM/"):
        assert repo.find_by_url(query) == entry
    assert repo.find_by_url("stripe.com/docs") is None


@pytest.mark.anyio
async def test_find_by_url_returns_most_recent_match() -> None:
    repo = AuditRepository(MemoryStorage())
    # append does not dedupe by itself
    await repo.append(make_entry("stripe.com", "old"))
    await repo.append(make_entry("https://stripe.com", "new"))
    assert repo.find_by_url("stripe.com").id == "new"
    assert len(repo) == 2


@pytest.mark.anyio
async def test_degenerate_url_is_a_valid_key() -> None:
    repo = AuditRepository(MemoryStorage())
    await repo.append(make_entry("https://", "1"))
    assert repo.find_by_url("").id == "1"


@pytest.mark.anyio
async def test_get_by_id() -> None:
    repo = AuditRepository(MemoryStorage())
    await repo.append(make_entry("a.com", "1"))
    assert repo.get("1").url == "a.com"
    assert repo.get("missing") is None


@pytest.mark.anyio
async def test_clear_empties_memory_and_storage() -> None:
    storage = MemoryStorage()
    repo = AuditRepository(storage)
    await repo.append(make_entry("https://stripe.com", "1"))
    await repo.clear()

    assert repo.find_by_url("stripe.com") is None
    assert len(repo) == 0
    assert json.loads(storage.blob) == []


@pytest.mark.anyio
async def test_write_failure_propagates_but_keeps_memory_state() -> None:
    repo = AuditRepository(BrokenStorage())
    with pytest.raises(ConnectionError):
        await repo.append(make_entry("a.com", "1"))
    assert repo.find_by_url("a.com").id == "1"
