from ats.models.application import Application, Stage
from ats.models.base import utcnow
from ats.models.job import Job
from ats.models.user import User

__all__ = ["Application", "Job", "Stage", "User", "utcnow"]
