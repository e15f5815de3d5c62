from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..services import applications as application_service
from ..services.access import Identity
from ..schemas.payloads import application_to_public, job_summary, user_summary
from ..utils.dependencies import get_settings
from ..utils.roles import applicant_only, recruiter_or_admin

router = APIRouter(prefix="/applications", tags=["Applications"])


class StatusUpdate(BaseModel):
    status: str | None = None  # applied / shortlisted / rejected


@router.get("/{job_id:int}/applicants")
def list_applicants(
    job_id: int,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
):
    job, applications = application_service.list_job_applicants(db, user, job_id)
    items = []
    for a in applications:
        payload = application_to_public(a)
        payload["applicant"] = user_summary(a.applicant)
        payload["job"] = job_summary(job, "title", "company")
        items.append(payload)
    return {"success": True, "applications": items}


@router.put("/{application_id:int}/status")
def update_status(
    application_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
):
    application = application_service.update_application_status(db, user, application_id, payload.status)
    return {
        "success": True,
        "message": "Application status updated",
        "application": application_to_public(application),
    }


@router.get("/{application_id:int}/resume")
def download_resume(
    application_id: int,
    db: Session = Depends(get_db),
    user: Identity = Depends(recruiter_or_admin),
    settings: Settings = Depends(get_settings),
):
    path = application_service.resume_file_for(db, user, application_id, settings)
    # Inline so the browser can preview instead of forcing a download.
    return FileResponse(path, filename=path.name, content_disposition_type="inline")


@router.post("/{job_id:int}/apply")
async def apply(
    job_id: int,
    resume: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    user: Identity = Depends(applicant_only),
    settings: Settings = Depends(get_settings),
):
    application = await application_service.apply_to_job(db, user, job_id, resume, settings)
    return {"success": True, "message": "Application submitted", "application": application_to_public(application)}


@router.get("/{user_id:int}")
def list_my_applications(
    user_id: int,
    db: Session = Depends(get_db),
    user: Identity = Depends(applicant_only),
):
    items = []
    for a in application_service.list_own_applications(db, user, user_id):
        payload = application_to_public(a)
        payload["job"] = job_summary(a.job, "title", "company", "location")
        items.append(payload)
    return {"success": True, "applications": items}
