from fastapi import APIRouter, Depends

from ..services.access import Identity
from ..utils.roles import admin_only, applicant_only, recruiter_only

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/applicant")
def applicant_dashboard(user: Identity = Depends(applicant_only)):
    return {"message": "Applicant Dashboard", "user": user.to_public()}


@router.get("/recruiter")
def recruiter_dashboard(user: Identity = Depends(recruiter_only)):
    return {"message": "Recruiter Dashboard", "user": user.to_public()}


@router.get("/admin")
def admin_dashboard(user: Identity = Depends(admin_only)):
    return {"message": "Admin Dashboard", "user": user.to_public()}
