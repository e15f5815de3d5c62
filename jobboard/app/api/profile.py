from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..services import accounts as account_service
from ..services.access import Identity
from ..schemas.payloads import user_to_public
from ..utils.dependencies import get_current_user, get_settings

router = APIRouter(prefix="/profile", tags=["Profile"])


class ProfileFields(BaseModel):
    # resume_url / company_logo are set by the upload endpoints only.
    skills: list[str] | str | None = None
    experience: str | None = None
    bio: str | None = None
    company_name: str | None = None
    website: str | None = None
    description: str | None = None


class ProfileUpdate(ProfileFields):
    name: str | None = None


@router.get("/me")
def get_my_profile(
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    return {"success": True, "user": user_to_public(account_service.get_user_or_404(db, user.id))}


@router.put("/me")
def replace_my_profile(
    payload: ProfileFields,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    updated = account_service.replace_profile(db, user, payload.model_dump())
    return {"success": True, "message": "Profile updated", "user": user_to_public(updated)}


@router.put("/update")
def update_my_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    updated = account_service.update_profile(db, user, payload.model_dump(exclude_unset=True))
    return {"success": True, "message": "Profile updated", "user": user_to_public(updated)}


@router.post("/upload")
async def upload_resume(
    resume: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    updated = await account_service.store_profile_resume(db, user, resume, settings)
    return {"success": True, "message": "Resume uploaded", "user": user_to_public(updated)}


@router.post("/upload-logo")
async def upload_logo(
    logo: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    updated = await account_service.store_company_logo(db, user, logo, settings)
    return {"success": True, "message": "Company logo uploaded", "user": user_to_public(updated)}
