from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base
from .enums import ApplicationStatus


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        # Storage-level guard against concurrent duplicate applies.
        UniqueConstraint("job_id", "applicant_id", name="uq_applications_job_applicant"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    resume_url = Column(String(500), nullable=False)  # relative to STORAGE_DIR
    status = Column(String(20), nullable=False, default=ApplicationStatus.APPLIED.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")
