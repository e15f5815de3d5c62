from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..services import jobs as job_service
from ..services.access import Identity
from ..schemas.payloads import job_to_public
from ..utils.dependencies import get_current_user, get_settings
from ..utils.roles import any_role, recruiter_or_admin

router = APIRouter(prefix="/jobs", tags=["Jobs"])


class JobCreate(BaseModel):
    title: str | None = None
    company: str | None = None
    location: str | None = None
    salary_range: str | None = None
    description: str | None = None
    requirements: list[str] | str | None = None


class JobUpdate(BaseModel):
    # Unknown keys (owner_id, status, ...) are dropped by pydantic.
    title: str | None = None
    company: str | None = None
    location: str | None = None
    salary_range: str | None = None
    description: str | None = None
    requirements: list[str] | str | None = None


class ListingStatusUpdate(BaseModel):
    status: str | None = None  # open / closed


@router.post("", status_code=201)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
):
    job = job_service.create_job(db, user, **payload.model_dump())
    return {"success": True, "job": job_to_public(job)}


@router.get("")
def list_jobs(
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    return {"success": True, "jobs": [job_to_public(j) for j in job_service.list_jobs(db)]}


@router.get("/{job_id:int}")
def get_job(
    job_id: int,
    db: Session = Depends(get_db),
    user: Identity = Depends(any_role),
):
    return {"success": True, "job": job_to_public(job_service.get_job_or_404(db, job_id))}


@router.put("/{job_id:int}")
def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
):
    job = job_service.update_job(db, user, job_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "job": job_to_public(job)}


@router.put("/{job_id:int}/status")
def update_listing_status(
    job_id: int,
    payload: ListingStatusUpdate,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
):
    job = job_service.set_listing_status(db, user, job_id, payload.status)
    return {"success": True, "job": job_to_public(job)}


@router.delete("/{job_id:int}")
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
    settings: Settings = Depends(get_settings),
):
    job_service.delete_job(db, user, job_id, settings)
    return {"success": True, "message": "Job removed", "deleted_job_id": job_id}
