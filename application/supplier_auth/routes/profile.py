from fastapi import APIRouter, Depends

from supplier_auth.dto.auth_otp import PublicUser
from supplier_auth.middlewares.auth import require_user
from supplier_auth.models.users import User

router = APIRouter(tags=["profile"])


@router.get("/me", response_model=PublicUser)
def me(user: User = Depends(require_user)):
    return PublicUser.from_user(user)
