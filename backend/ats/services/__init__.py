from ats.services.applications import ApplicationRepository
from ats.services.auth import AuthService
from ats.services.file_store import FileStore
from ats.services.jobs import JobRepository
from ats.services.rate_limit import FixedWindowRateLimiter
from ats.services.session_cache import SessionCache

__all__ = [
    "ApplicationRepository",
    "AuthService",
    "FileStore",
    "FixedWindowRateLimiter",
    "JobRepository",
    "SessionCache",
]
