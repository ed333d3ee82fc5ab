import os

import pytest

# Keep app startup away from a real Redis and the Gemini API in tests.
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("AUDIT_PAGE_CONTEXT", "0")

from uxaudit.models.schema import AuditResult, HistoryEntry  # noqa: E402


@pytest.fixture(scope="module")
def anyio_backend() -> str:
    return "asyncio"


def make_result(
    product: str = "Stripe payments platform",
    elegance: int = 80,
    clarity: int = 70,
    modernity: int = 90,
    problems: list[str] | None = None,
) -> AuditResult:
    return AuditResult.model_validate({
        "summary": {"product": product, "targetAudience": "Developers and online businesses"},
        "scores": {"elegance": elegance, "clarity": clarity, "modernity": modernity},
        "problems": [
            {"problem": p, "whyItMatters": "Users get lost."}
            for p in (problems if problems is not None else ["Visibility: Hidden menu"])
        ],
        "improvements": ["Add an LLM support assistant."],
        "aiOpportunity": "Predictive checkout personalization.",
    })


def make_entry(url: str, entry_id: str = "e1", timestamp: int = 1_700_000_000_000, **kwargs) -> HistoryEntry:
    return HistoryEntry(id=entry_id, url=url, timestamp=timestamp, result=make_result(**kwargs))


@pytest.fixture
def result() -> AuditResult:
    return make_result()
