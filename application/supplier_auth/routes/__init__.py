from fastapi import APIRouter
from supplier_auth.routes.auth_otp import router as auth_otp_router
from supplier_auth.routes.profile import router as profile_router

auth_router = APIRouter()
auth_router.include_router(auth_otp_router)
auth_router.include_router(profile_router)
