from fastapi import APIRouter
from fastapi.responses import JSONResponse

from supplier_auth.config.settings import AuthConfigs
configs = AuthConfigs()

router = APIRouter()


@router.get("/health")
async def health_check():

    details = {
        "status": "healthy",
        "version": configs.APP_VERSION,
        "service": configs.APP_NAME
    }
    return JSONResponse(content=details)
