from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.enums import ModerationStatus
from ..services import accounts as account_service
from ..services import jobs as job_service
from ..services.access import Identity
from ..schemas.payloads import job_to_public, user_to_public
from ..utils.roles import admin_only

router = APIRouter(prefix="/admin", tags=["Admin"])


class ModerationUpdate(BaseModel):
    status: str = ModerationStatus.APPROVED.value  # approved / rejected


@router.get("/users")
def list_users(
    db: Session = Depends(get_db),
    user: Identity = Depends(admin_only),
):
    return {"success": True, "users": [user_to_public(u) for u in account_service.list_users(db, user)]}


@router.put("/users/{user_id:int}/toggle")
def toggle_user_block(
    user_id: int,
    db: Session = Depends(get_db),
    user: Identity = Depends(admin_only),
):
    target = account_service.toggle_blocked(db, user, user_id)
    state = "blocked" if target.is_blocked else "unblocked"
    return {"success": True, "message": f"User {state}", "user": user_to_public(target)}


@router.get("/jobs")
def list_all_jobs(
    db: Session = Depends(get_db),
    user: Identity = Depends(admin_only),
):
    jobs = job_service.list_jobs(db, include_owner=True)
    return {"success": True, "jobs": [job_to_public(j, include_owner=True) for j in jobs]}


@router.put("/jobs/{job_id:int}/approve")
def moderate_job(
    job_id: int,
    payload: ModerationUpdate | None = None,
    db: Session = Depends(get_db),
    user: Identity = Depends(admin_only),
):
    status = payload.status if payload is not None else ModerationStatus.APPROVED.value
    job = job_service.moderate_job(db, user, job_id, status)
    return {"success": True, "message": f"Job {job.moderation_status}", "job": job_to_public(job)}


@router.get("/stats")
def stats(
    db: Session = Depends(get_db),
    user: Identity = Depends(admin_only),
):
    return {"success": True, "stats": account_service.collect_stats(db, user)}
