from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ats.config import Settings, get_app_settings
from ats.database import get_db
from ats.errors import Unauthenticated
from ats.models import User
from ats.services.auth import AuthService
from ats.services.session_cache import SessionCache, get_session_cache

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    cache: SessionCache = Depends(get_session_cache),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(db, cache, settings)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None:
        raise Unauthenticated()
    return await auth.authenticate(credentials.credentials)
