"""
Response payload builders. Keys are snake_case; password hashes never leave here.
"""
from datetime import datetime

from ..models.application import Application
from ..models.columns import load_string_list
from ..models.job import Job
from ..models.user import User


def _iso(value) -> str | None:
    return value.isoformat() if isinstance(value, datetime) else value


def user_summary(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def user_to_public(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_blocked": bool(user.is_blocked),
        "profile": {
            "resume_url": user.resume_url,
            "skills": load_string_list(user.skills),
            "experience": user.experience,
            "bio": user.bio,
            "company_name": user.company_name,
            "company_logo": user.company_logo,
            "website": user.website,
            "description": user.description,
        },
        "created_at": _iso(user.created_at),
        "updated_at": _iso(user.updated_at),
    }


def job_to_public(job: Job, *, include_owner: bool = False) -> dict:
    payload = {
        "id": job.id,
        "title": job.title,
        "company": job.company,
        "location": job.location,
        "salary_range": job.salary_range,
        "description": job.description,
        "requirements": load_string_list(job.requirements),
        "owner_id": job.owner_id,
        "status": job.status,
        "moderation_status": job.moderation_status,
        "created_at": _iso(job.created_at),
        "updated_at": _iso(job.updated_at),
    }
    if include_owner:
        payload["owner"] = user_summary(job.owner)
    return payload


def job_summary(job: Job | None, *fields: str) -> dict | None:
    if job is None:
        return None
    summary = {"id": job.id}
    for field in fields or ("title", "company", "location"):
        summary[field] = getattr(job, field)
    return summary


def application_to_public(application: Application) -> dict:
    return {
        "id": application.id,
        "job_id": application.job_id,
        "applicant_id": application.applicant_id,
        "resume_url": application.resume_url,
        "status": application.status,
        "created_at": _iso(application.created_at),
        "updated_at": _iso(application.updated_at),
    }
