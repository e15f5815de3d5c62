from .application import Application
from .enums import ApplicationStatus, ListingStatus, ModerationStatus, Role
from .job import Job
from .user import User

__all__ = [
    "Application",
    "ApplicationStatus",
    "Job",
    "ListingStatus",
    "ModerationStatus",
    "Role",
    "User",
]
