"""
API routers.

Every /api route runs an ordered chain of router dependencies before its
handler; each may short-circuit with a typed error:

    1. enforce_rate_limit  (admission control, all /api routes)
    2. get_current_user    (all routes except sign-in and password reset)
"""

from fastapi import APIRouter, Depends

from ats.api import applications, auth, jobs, uploads, user
from ats.auth import get_current_user
from ats.services.rate_limit import enforce_rate_limit

admission = [Depends(enforce_rate_limit)]
authenticated = admission + [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router, prefix="/auth", tags=["auth"], dependencies=admission)
api_router.include_router(user.router, prefix="/user", tags=["user"], dependencies=authenticated)
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"], dependencies=authenticated)
api_router.include_router(
    applications.router,
    prefix="/jobs/{job_id}/applications",
    tags=["applications"],
    dependencies=authenticated,
)

uploads_router = APIRouter()
uploads_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
