"""
Error taxonomy for the ATS API.

Services raise these typed errors; the application registers a single
handler for ``ATSError`` (see ``ats.main``) which renders
``{"detail": message}`` with the error's HTTP status.

    ATSError
    ├── Unauthenticated        401
    ├── InvalidCredentials     401
    ├── InvalidOrExpiredToken  400
    ├── ValidationError        400
    ├── NotFound               404
    ├── RateLimitExceeded      429
    └── InternalError          500
"""

from typing import Dict, Optional


class ATSError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class Unauthenticated(ATSError):
    status_code = 401
    default_message = "Please authenticate."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(ATSError):
    status_code = 401
    default_message = "Invalid credentials"


class InvalidOrExpiredToken(ATSError):
    status_code = 400
    default_message = "Invalid or expired token"


class ValidationError(ATSError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(ATSError):
    status_code = 404
    default_message = "Not found"


class RateLimitExceeded(ATSError):
    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(headers={"Retry-After": str(retry_after)})


class InternalError(ATSError):
    status_code = 500
