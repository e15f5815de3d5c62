from fastapi import Depends

from ..models.enums import Role
from ..services.access import Identity, check_role
from .dependencies import get_current_user


def require_roles(*allowed: Role):
    allowed_set = frozenset(allowed)

    def check_roles(user: Identity = Depends(get_current_user)) -> Identity:
        check_role(user, allowed_set)
        return user
    return check_roles


applicant_only = require_roles(Role.APPLICANT)
recruiter_only = require_roles(Role.RECRUITER)
admin_only = require_roles(Role.ADMIN)
recruiter_or_admin = require_roles(Role.RECRUITER, Role.ADMIN)
any_role = require_roles(Role.APPLICANT, Role.RECRUITER, Role.ADMIN)
