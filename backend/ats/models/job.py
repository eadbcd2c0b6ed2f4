"""
Job Model - job postings managed by recruiters

``applications_count`` is not a column: the job repository computes it
with an aggregation over applications on every read and attaches it to
the instance it returns.
"""

from sqlalchemy import Column, String, Boolean
from ats.database import Base
from ats.models.base import TimestampMixin
import uuid


class Job(TimestampMixin, Base):
    """
    Job posting.

    Attributes:
        id: UUID primary key
        title: Posting title (searchable)
        department: Owning department
        location: Work location
        is_open: Only open postings are listed
    """

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(500), nullable=False)
    department = Column(String(500), nullable=False)
    location = Column(String(500), nullable=False)
    is_open = Column(Boolean, nullable=False, default=True, index=True)

    applications_count = 0
