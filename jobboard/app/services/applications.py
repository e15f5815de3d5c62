"""
Application lifecycle.

Status moves freely between applied, shortlisted and rejected; any actor
allowed to update an application may set any of the three at any time.
Ownership for recruiter actions is always checked against the job's owner.
"""
import logging
from pathlib import Path
from typing import Any

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..config import Settings
from ..models.application import Application
from ..models.enums import ApplicationStatus, Role
from ..models.job import Job
from .access import Identity, check_ownership, check_role
from .jobs import get_job_or_404
from .storage import RESUME_UPLOAD, remove_stored_file, resolve_stored_path, save_upload
from ..utils.error_handlers import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    get_error_message,
    is_unique_violation,
)
from ..utils.validation import is_row_id, validate_choice

logger = logging.getLogger(__name__)

REVIEWERS = frozenset({Role.RECRUITER, Role.ADMIN})


def find_application(db: Session, *, job_id: int, applicant_id: int) -> Application | None:
    return (
        db.query(Application)
        .filter(Application.job_id == int(job_id), Application.applicant_id == int(applicant_id))
        .first()
    )


def get_application_or_404(db: Session, application_id: int) -> Application:
    if not is_row_id(application_id):
        raise NotFoundError(get_error_message("application_not_found"))
    application = (
        db.query(Application)
        .options(joinedload(Application.job))
        .filter(Application.id == int(application_id))
        .first()
    )
    if not application:
        raise NotFoundError(get_error_message("application_not_found"))
    return application


async def apply_to_job(
    db: Session,
    identity: Identity,
    job_id: int,
    resume: UploadFile | None,
    settings: Settings,
) -> Application:
    check_role(identity, {Role.APPLICANT})
    job = get_job_or_404(db, job_id)
    # Fast path for a friendly error; the unique key is the real guard.
    if find_application(db, job_id=job.id, applicant_id=identity.id):
        raise ConflictError(get_error_message("already_applied"))
    if resume is None or not resume.filename:
        raise ValidationError(get_error_message("resume_required"))

    resume_ref = await save_upload(resume, RESUME_UPLOAD, settings)

    application = Application(
        job_id=job.id,
        applicant_id=identity.id,
        resume_url=resume_ref,
        status=ApplicationStatus.APPLIED.value,
    )
    db.add(application)
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        remove_stored_file(resume_ref, settings)
        if isinstance(e, IntegrityError) and is_unique_violation(e):
            logger.info("Concurrent duplicate apply: job=%s applicant=%s", job.id, identity.id)
            raise ConflictError(get_error_message("already_applied")) from None
        raise
    db.refresh(application)
    logger.info("Application %s created: job=%s applicant=%s", application.id, job.id, identity.id)
    return application


def list_own_applications(db: Session, identity: Identity, applicant_id: int) -> list[Application]:
    check_role(identity, {Role.APPLICANT})
    if identity.id != int(applicant_id):
        raise ForbiddenError("Not authorized")
    return (
        db.query(Application)
        .options(joinedload(Application.job))
        .filter(Application.applicant_id == identity.id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )


def list_job_applicants(db: Session, identity: Identity, job_id: int) -> tuple[Job, list[Application]]:
    check_role(identity, REVIEWERS)
    job = get_job_or_404(db, job_id)
    check_ownership(identity, job.owner_id, message=get_error_message("applicants_forbidden"))
    applications = (
        db.query(Application)
        .options(joinedload(Application.applicant))
        .filter(Application.job_id == job.id)
        .order_by(Application.created_at.asc(), Application.id.asc())
        .all()
    )
    return job, applications


def update_application_status(db: Session, identity: Identity, application_id: int, status: Any) -> Application:
    check_role(identity, REVIEWERS)
    application = get_application_or_404(db, application_id)
    job_owner_id = application.job.owner_id if application.job else None
    check_ownership(identity, job_owner_id, message=get_error_message("application_update_forbidden"))
    new_status = validate_choice(status, ApplicationStatus)

    application.status = new_status.value
    db.commit()
    db.refresh(application)
    logger.info("Application %s set to %s by user %s", application.id, application.status, identity.id)
    return application


def resume_file_for(db: Session, identity: Identity, application_id: int, settings: Settings) -> Path:
    check_role(identity, REVIEWERS)
    application = get_application_or_404(db, application_id)
    return resolve_stored_path(application.resume_url, settings.upload_dir, settings.storage_dir)
