from fastapi import APIRouter, Depends

from aidreams.api.ai.router import router as ai_router
from aidreams.api.core.dependencies import enforce_ip_rate_limit
from aidreams.api.health.router import router as health_router
from aidreams.api.keys.router import router as keys_router

# V1 API router, rate limited per client IP
v1_router = APIRouter(prefix="/v1", dependencies=[Depends(enforce_ip_rate_limit)])

v1_router.include_router(ai_router)
v1_router.include_router(keys_router)

# Main API router
api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
