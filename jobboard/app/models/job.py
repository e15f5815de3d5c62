from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base
from .enums import ListingStatus


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(150), nullable=False)
    company = Column(String(150), nullable=False)
    location = Column(String(100), nullable=False)
    salary_range = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=True)  # JSON string list, order preserved
    status = Column(String(20), nullable=False, default=ListingStatus.OPEN.value)  # open | closed
    # None until an admin moderates the posting.
    moderation_status = Column(String(20), nullable=True)  # approved | rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="jobs")
    # Deleting a job removes its applications (ORM cascade + ON DELETE CASCADE).
    applications = relationship(
        "Application",
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
