from fastapi import APIRouter, Depends

from ats.auth import get_current_user
from ats.models import User
from ats.schemas import UserResponse

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
