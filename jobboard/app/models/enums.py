"""
Closed value sets for roles and statuses.
Columns store the plain string value; parse with the enum before persisting.
"""
from enum import Enum


class Role(str, Enum):
    APPLICANT = "applicant"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class ListingStatus(str, Enum):
    """Job visibility to applicants."""
    OPEN = "open"
    CLOSED = "closed"


class ModerationStatus(str, Enum):
    """Admin approval of a job posting, independent of ListingStatus."""
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
