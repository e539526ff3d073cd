from fastapi import APIRouter

from passcode.core.mfa import router as mfa
from passcode.platform.router import api_router as platform_router

api_router = APIRouter()
api_router.include_router(platform_router)
api_router.include_router(mfa.router, prefix='/mfa', tags=['mfa'])
