"""
Account registration, login, self-service profile edits and admin account
management.
"""
import logging
from typing import Any

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings
from ..models.application import Application
from ..models.columns import dump_string_list
from ..models.enums import ApplicationStatus, ListingStatus, ModerationStatus, Role
from ..models.job import Job
from ..models.user import User
from .access import Identity, check_role
from .storage import LOGO_UPLOAD, RESUME_UPLOAD, UploadKind, remove_stored_file, save_upload
from ..utils.error_handlers import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
    get_error_message,
    is_unique_violation,
)
from ..utils.security import hash_password, verify_password
from ..utils.validation import (
    is_row_id,
    validate_email,
    validate_password,
    validate_role,
    validate_string_field,
    validate_string_list,
)

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = frozenset({Role.APPLICANT, Role.RECRUITER})

# Profile columns a user may edit directly; file references are upload-only.
EDITABLE_PROFILE_FIELDS = ("skills", "experience", "bio", "company_name", "website", "description")


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == int(user_id)).first() if is_row_id(user_id) else None
    if not user:
        raise NotFoundError(get_error_message("user_not_found"))
    return user


def register_user(db: Session, settings: Settings, *, name: Any, email: Any, password: Any, role: Any) -> User:
    if not name or not email or not password or not role:
        raise ValidationError("All fields are required")

    clean_name = validate_string_field(name, "Name", max_length=255)
    clean_email = validate_email(email)
    validate_password(password)
    parsed_role = validate_role(role)
    if parsed_role not in SELF_SERVICE_ROLES and not settings.allow_admin_signup:
        raise ForbiddenError("Admin accounts cannot be created through signup")

    if db.query(User).filter(User.email == clean_email).first():
        raise ValidationError(get_error_message("email_exists"))

    try:
        hashed = hash_password(password)
    except ValueError as e:
        raise ValidationError(str(e)) from None

    user = User(name=clean_name, email=clean_email, password=hashed, role=parsed_role.value)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise ValidationError(get_error_message("email_exists")) from None
        raise
    db.refresh(user)
    logger.info("Registered %s account %s", user.role, user.id)
    return user


def authenticate_credentials(db: Session, *, email: Any, password: Any) -> User:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == validate_email(email)).first()
    if not user or not verify_password(password, user.password):
        raise UnauthenticatedError(get_error_message("invalid_credentials"))
    if user.is_blocked:
        raise ForbiddenError(get_error_message("account_blocked"))
    return user


def replace_profile(db: Session, identity: Identity, updates: dict[str, Any]) -> User:
    """Overwrite every editable profile field; omitted fields are cleared."""
    user = get_user_or_404(db, identity.id)
    for field in EDITABLE_PROFILE_FIELDS:
        _apply_profile_field(user, field, updates.get(field))
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, identity: Identity, updates: dict[str, Any]) -> User:
    """Merge the provided fields into the profile; ``name`` updates the account."""
    user = get_user_or_404(db, identity.id)
    if updates.get("name") is not None:
        user.name = validate_string_field(updates["name"], "Name", max_length=255)
    for field in EDITABLE_PROFILE_FIELDS:
        if field in updates and updates[field] is not None:
            _apply_profile_field(user, field, updates[field])
    db.commit()
    db.refresh(user)
    return user


def _apply_profile_field(user: User, field: str, value: Any) -> None:
    if field == "skills":
        user.skills = dump_string_list(validate_string_list(value, "Skills"))
        return
    setattr(user, field, validate_string_field(value, field.replace("_", " ").capitalize(), max_length=5000, required=False))


async def _replace_stored_file(
    db: Session, identity: Identity, upload: UploadFile | None, kind: UploadKind, column: str, settings: Settings
) -> User:
    user = get_user_or_404(db, identity.id)
    previous = getattr(user, column)
    stored = await save_upload(upload, kind, settings)
    setattr(user, column, stored)
    try:
        db.commit()
    except Exception:
        db.rollback()
        remove_stored_file(stored, settings)
        raise
    db.refresh(user)
    if previous and previous != stored:
        remove_stored_file(previous, settings)
    return user


async def store_profile_resume(db: Session, identity: Identity, upload: UploadFile | None, settings: Settings) -> User:
    return await _replace_stored_file(db, identity, upload, RESUME_UPLOAD, "resume_url", settings)


async def store_company_logo(db: Session, identity: Identity, upload: UploadFile | None, settings: Settings) -> User:
    return await _replace_stored_file(db, identity, upload, LOGO_UPLOAD, "company_logo", settings)


def list_users(db: Session, identity: Identity) -> list[User]:
    check_role(identity, {Role.ADMIN})
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def toggle_blocked(db: Session, identity: Identity, user_id: int) -> User:
    check_role(identity, {Role.ADMIN})
    user = get_user_or_404(db, user_id)
    if int(user.id) == identity.id:
        raise ValidationError("You cannot block your own account")

    user.is_blocked = not bool(user.is_blocked)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set blocked=%s for user %s", identity.id, user.is_blocked, user.id)
    return user


def _count_by(db: Session, column, members) -> dict[str, int]:
    rows = dict(db.query(column, func.count()).group_by(column).all())
    return {member.value: int(rows.get(member.value, 0)) for member in members}


def collect_stats(db: Session, identity: Identity) -> dict:
    check_role(identity, {Role.ADMIN})
    moderation = _count_by(db, Job.moderation_status, ModerationStatus)
    total_jobs = db.query(func.count(Job.id)).scalar() or 0
    return {
        "users": {
            "total": db.query(func.count(User.id)).scalar() or 0,
            "blocked": db.query(func.count(User.id)).filter(User.is_blocked.is_(True)).scalar() or 0,
            **_count_by(db, User.role, Role),
        },
        "jobs": {
            "total": total_jobs,
            **_count_by(db, Job.status, ListingStatus),
            **moderation,
            "unmoderated": total_jobs - sum(moderation.values()),
        },
        "applications": {
            "total": db.query(func.count(Application.id)).scalar() or 0,
            **_count_by(db, Application.status, ApplicationStatus),
        },
    }
