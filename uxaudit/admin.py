# admin.py
from fastapi import APIRouter, Depends, Header, HTTPException

from uxaudit import config
from uxaudit.core.history import AuditRepository
from uxaudit.deps import get_repository

router = APIRouter()


def check_admin_token(x_admin_token: str = Header(None, alias="x-admin-token")):
    if not x_admin_token or x_admin_token != config.ADMIN_TOKEN:
        raise HTTPException(status_code=403, detail="Invalid admin token")
    return True


@router.delete("/history", dependencies=[Depends(check_admin_token)])
async def clear_history(repository: AuditRepository = Depends(get_repository)):
    await repository.clear()
    return {"status": "ok", "message": "History cleared"}
