from ats.schemas.application import ApplicationResponse, StageUpdate
from ats.schemas.auth import (
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    SignInRequest,
    SignInResponse,
)
from ats.schemas.job import JobCreate, JobListResponse, JobResponse, JobUpdate
from ats.schemas.user import UserResponse

__all__ = [
    "ApplicationResponse",
    "StageUpdate",
    "MessageResponse",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "SignInRequest",
    "SignInResponse",
    "JobCreate",
    "JobUpdate",
    "JobResponse",
    "JobListResponse",
    "UserResponse",
]
