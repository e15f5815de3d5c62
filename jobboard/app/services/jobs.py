"""
Job posting lifecycle: create, read, whitelisted update, delete, listing
status and admin moderation.

Listing status (open/closed) and moderation status (approved/rejected) are
independent; neither one changes the other.
"""
import logging
from typing import Any

from sqlalchemy.orm import Session, joinedload

from ..config import Settings
from ..models.columns import dump_string_list
from ..models.enums import ListingStatus, ModerationStatus, Role
from ..models.job import Job
from .access import Identity, check_ownership, check_role
from .storage import remove_stored_file
from ..utils.error_handlers import NotFoundError, ValidationError, get_error_message
from ..utils.validation import is_row_id, validate_choice, validate_string_field, validate_string_list

logger = logging.getLogger(__name__)

JOB_AUTHORS = frozenset({Role.RECRUITER, Role.ADMIN})

# Only these columns may be overwritten through update_job().
UPDATABLE_FIELDS = ("title", "company", "location", "salary_range", "description", "requirements")

_REQUIRED_TEXT_FIELDS = {
    "title": ("Title", 150),
    "company": ("Company", 150),
    "location": ("Location", 100),
    "salary_range": ("Salary range", 50),
    "description": ("Description", 5000),
}


def get_job_or_404(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == int(job_id)).first() if is_row_id(job_id) else None
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))
    return job


def create_job(
    db: Session,
    identity: Identity,
    *,
    title: Any,
    company: Any,
    location: Any,
    salary_range: Any,
    description: Any,
    requirements: Any = None,
) -> Job:
    check_role(identity, JOB_AUTHORS)

    values = {"title": title, "company": company, "location": location,
              "salary_range": salary_range, "description": description}
    if any(not isinstance(v, str) or not v.strip() for v in values.values()):
        raise ValidationError(get_error_message("job_fields_required"))
    cleaned = {
        name: validate_string_field(values[name], label, max_length=max_length)
        for name, (label, max_length) in _REQUIRED_TEXT_FIELDS.items()
    }

    job = Job(
        **cleaned,
        requirements=dump_string_list(validate_string_list(requirements, "Requirements")),
        owner_id=identity.id,
        status=ListingStatus.OPEN.value,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Job %s created by user %s", job.id, identity.id)
    return job


def list_jobs(db: Session, *, include_owner: bool = False) -> list[Job]:
    q = db.query(Job)
    if include_owner:
        q = q.options(joinedload(Job.owner))
    return q.order_by(Job.created_at.desc(), Job.id.desc()).all()


def update_job(db: Session, identity: Identity, job_id: int, changes: dict[str, Any]) -> Job:
    check_role(identity, JOB_AUTHORS)
    job = get_job_or_404(db, job_id)
    check_ownership(identity, job.owner_id, message=get_error_message("job_update_forbidden"))

    for field in UPDATABLE_FIELDS:
        if field not in changes or changes[field] is None:
            continue
        value = changes[field]
        if field == "requirements":
            job.requirements = dump_string_list(validate_string_list(value, "Requirements"))
        else:
            label, max_length = _REQUIRED_TEXT_FIELDS[field]
            setattr(job, field, validate_string_field(value, label, max_length=max_length))

    ignored = sorted(set(changes) - set(UPDATABLE_FIELDS))
    if ignored:
        logger.info("Ignoring non-updatable job fields %s for job %s", ignored, job.id)

    db.commit()
    db.refresh(job)
    return job


def delete_job(db: Session, identity: Identity, job_id: int, settings: Settings) -> None:
    """Delete a job and, with it, every application submitted to it."""
    check_role(identity, JOB_AUTHORS)
    job = get_job_or_404(db, job_id)
    check_ownership(identity, job.owner_id, message=get_error_message("job_delete_forbidden"))

    resume_refs = [a.resume_url for a in job.applications]
    db.delete(job)
    db.commit()
    logger.info("Job %s deleted by user %s (%d applications removed)", job_id, identity.id, len(resume_refs))

    for ref in resume_refs:
        remove_stored_file(ref, settings)


def set_listing_status(db: Session, identity: Identity, job_id: int, status: Any) -> Job:
    check_role(identity, JOB_AUTHORS)
    job = get_job_or_404(db, job_id)
    check_ownership(identity, job.owner_id, message=get_error_message("job_update_forbidden"))
    listing_status = validate_choice(status, ListingStatus)

    job.status = listing_status.value
    db.commit()
    db.refresh(job)
    return job


def moderate_job(db: Session, identity: Identity, job_id: int, status: Any) -> Job:
    check_role(identity, {Role.ADMIN})
    job = get_job_or_404(db, job_id)
    moderation_status = validate_choice(status, ModerationStatus)

    job.moderation_status = moderation_status.value
    db.commit()
    db.refresh(job)
    logger.info("Job %s moderated as %s by admin %s", job.id, job.moderation_status, identity.id)
    return job
