# app.py
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException

from uxaudit import config
from uxaudit.admin import router as admin_router
from uxaudit.core.analytics import overall_score, score_band, site_name, summarize
from uxaudit.core.gemini import AuditCapabilityError, GeminiAuditor
from uxaudit.core.history import AuditRepository
from uxaudit.core.orchestrator import AuditOrchestrator
from uxaudit.deps import get_orchestrator, get_repository
from uxaudit.models.schema import (
    AnalyticsReport,
    AuditRequest,
    AuditResponse,
    HistoryEntry,
    HistoryListItem,
)
from uxaudit.storage import close_storage, init_storage

# ---------- logging ----------
logging.basicConfig(level=config.LOG_LEVEL)
log = logging.getLogger("uxaudit")

AUDIT_FAILED = "Failed to audit website. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage = await init_storage()
    repository = AuditRepository(storage)
    await repository.load()
    app.state.repository = repository
    app.state.orchestrator = AuditOrchestrator(repository, GeminiAuditor())
    yield
    await close_storage()


# ---------- app ----------
app = FastAPI(title="Visionary UX Audit API", version="0.1.0", lifespan=lifespan)


def history_item(entry: HistoryEntry) -> HistoryListItem:
    score = overall_score(entry.result)
    return HistoryListItem(
        id=entry.id,
        url=entry.url,
        timestamp=entry.timestamp,
        result=entry.result,
        site_name=site_name(entry.url),
        overall_score=score,
        score_band=score_band(score),
    )


# ---------- audit ----------
@app.post("/audit", response_model=AuditResponse)
async def audit_site(request: AuditRequest, orchestrator: AuditOrchestrator = Depends(get_orchestrator)):
    try:
        outcome = await orchestrator.run_audit(request.url)
    except AuditCapabilityError as e:
        log.error("Audit failed for %s: %s", request.url, e)
        raise HTTPException(status_code=502, detail=AUDIT_FAILED)
    return AuditResponse(result=outcome.result, entry=outcome.entry, cached=outcome.cached)


# ---------- history ----------
@app.get("/history", response_model=List[HistoryListItem])
async def list_history(repository: AuditRepository = Depends(get_repository)):
    return [history_item(e) for e in repository.entries]


@app.get("/history/{entry_id}", response_model=HistoryListItem)
async def get_history_entry(entry_id: str, repository: AuditRepository = Depends(get_repository)):
    entry = repository.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Audit not found")
    return history_item(entry)


# ---------- analytics ----------
@app.get("/analytics", response_model=AnalyticsReport)
async def analytics(repository: AuditRepository = Depends(get_repository)):
    return summarize(repository.entries)


app.include_router(admin_router)


# ---------- health endpoints ----------
@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def read_root():
    return {"message": "Visionary UX Audit API (ready)"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
