from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base
from .enums import Role


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # store hashed password
    role = Column(String(20), nullable=False, default=Role.APPLICANT.value)  # applicant / recruiter / admin
    is_blocked = Column(Boolean, nullable=False, default=False)

    # Applicant profile
    resume_url = Column(String(500), nullable=True)  # relative to STORAGE_DIR
    skills = Column(Text, nullable=True)  # JSON string list
    experience = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)

    # Recruiter profile
    company_name = Column(String(255), nullable=True)
    company_logo = Column(String(500), nullable=True)  # relative to STORAGE_DIR
    website = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    jobs = relationship("Job", back_populates="owner")
    applications = relationship("Application", back_populates="applicant")
