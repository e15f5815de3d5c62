"""
Authorization gates.

authenticate() turns a bearer token into an Identity by re-reading the
account from storage; the role claim in the token is advisory only.
check_role() and check_ownership() are pure predicates over that Identity.
"""
from collections.abc import Iterable
from dataclasses import dataclass
import logging

from jose import JWTError
from sqlalchemy.orm import Session

from ..config import Settings
from ..models.enums import Role
from ..models.user import User
from ..utils.error_handlers import ForbiddenError, UnauthenticatedError, get_error_message
from ..utils.security import decode_access_token
from ..utils.validation import is_row_id

logger = logging.getLogger(__name__)

ADMIN_BYPASS = frozenset({Role.ADMIN})


@dataclass(frozen=True, slots=True)
class Identity:
    id: int
    role: Role
    is_blocked: bool
    name: str | None = None
    email: str | None = None

    def to_public(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "is_blocked": self.is_blocked,
        }


def _subject_id(claims: dict) -> int:
    sub = claims.get("sub")
    try:
        subject = int(sub)
    except (TypeError, ValueError):
        raise UnauthenticatedError(get_error_message("token_failed")) from None
    if not is_row_id(subject):
        raise UnauthenticatedError(get_error_message("token_failed"))
    return subject


def authenticate(db: Session, raw_credential: str | None, settings: Settings) -> Identity:
    if not raw_credential or not raw_credential.strip():
        raise UnauthenticatedError(get_error_message("no_token"))

    try:
        claims = decode_access_token(raw_credential.strip(), settings)
    except JWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise UnauthenticatedError(get_error_message("token_failed")) from None

    user = db.query(User).filter(User.id == _subject_id(claims)).first()
    if not user:
        raise UnauthenticatedError(get_error_message("token_failed"))

    if user.is_blocked:
        logger.info("Blocked account %s attempted access", user.id)
        raise ForbiddenError(get_error_message("account_blocked"))

    try:
        role = Role(user.role)
    except ValueError:
        logger.warning("Account %s has unknown role %r", user.id, user.role)
        raise ForbiddenError(get_error_message("access_denied")) from None

    return Identity(
        id=int(user.id),
        role=role,
        is_blocked=bool(user.is_blocked),
        name=user.name,
        email=user.email,
    )


def check_role(identity: Identity, allowed_roles: Iterable[Role]) -> None:
    if identity.role not in frozenset(allowed_roles):
        raise ForbiddenError(get_error_message("access_denied"))


def is_owner_or_elevated(identity: Identity, owner_id: int | None, elevated_roles: Iterable[Role] = ADMIN_BYPASS) -> bool:
    if identity.role in frozenset(elevated_roles):
        return True
    return owner_id is not None and int(owner_id) == identity.id


def check_ownership(
    identity: Identity,
    owner_id: int | None,
    elevated_roles: Iterable[Role] = ADMIN_BYPASS,
    *,
    message: str | None = None,
) -> None:
    if not is_owner_or_elevated(identity, owner_id, elevated_roles):
        logger.info("Ownership check failed: user=%s owner=%s", identity.id, owner_id)
        raise ForbiddenError(message or get_error_message("access_denied"))
