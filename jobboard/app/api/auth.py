from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..services.access import Identity
from ..services.accounts import authenticate_credentials, register_user
from ..utils.dependencies import get_current_user, get_settings
from ..utils.security import create_access_token

router = APIRouter(prefix="/auth", tags=["Auth"])


class SignupRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None  # applicant / recruiter (admin only when enabled)


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


def _token_response(message: str, user, settings: Settings) -> dict:
    token = create_access_token(subject=user.id, role=user.role, settings=settings)
    return {
        "success": True,
        "message": message,
        "access_token": token,
        "token_type": "bearer",
        "user": {"id": user.id, "name": user.name, "email": user.email, "role": user.role},
    }


@router.post("/signup")
def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = register_user(
        db,
        settings,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return _token_response("User registered successfully", user, settings)


@router.post("/login")
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = authenticate_credentials(db, email=payload.email, password=payload.password)
    return _token_response("Login successful", user, settings)


@router.get("/profile")
def profile(user: Identity = Depends(get_current_user)):
    return {"success": True, "message": "Welcome!", "user": user.to_public()}


@router.post("/logout")
def logout():
    # Tokens are stateless; the client discards its copy.
    return {"success": True, "message": "Logged out successfully"}
