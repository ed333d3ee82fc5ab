from fastapi import Request

from uxaudit.core.history import AuditRepository
from uxaudit.core.orchestrator import AuditOrchestrator


def get_repository(request: Request) -> AuditRepository:
    return request.app.state.repository


def get_orchestrator(request: Request) -> AuditOrchestrator:
    return request.app.state.orchestrator
