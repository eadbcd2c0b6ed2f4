"""
Application Model - a candidacy for one job

Stage Funnel (no enforced transitions, any stage may follow any other):
    Applied → Shortlisted → Interview → Offer / Rejected
"""

import enum
import uuid

from sqlalchemy import Column, ForeignKey, String
from ats.database import Base
from ats.models.base import TimestampMixin


class Stage(str, enum.Enum):
    APPLIED = "Applied"
    SHORTLISTED = "Shortlisted"
    INTERVIEW = "Interview"
    REJECTED = "Rejected"
    OFFER = "Offer"


class Application(TimestampMixin, Base):
    """
    Candidate application.

    Attributes:
        id: UUID primary key
        name/email/phone: Candidate contact details
        job_id: Owning job (immutable after creation)
        cv_url: File store locator of the uploaded CV (set once)
        stage: One of the Stage values (indexed)
    """

    __tablename__ = "applications"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=False)
    cv_url = Column(String(1024), nullable=False)
    stage = Column(String(20), nullable=False, default=Stage.APPLIED.value, index=True)
    job_id = Column(String, ForeignKey("jobs.id"), nullable=False, index=True)
