from fastapi import APIRouter

from casebank.api.v1.endpoints import health, restores

api_router = APIRouter()
api_router.include_router(restores.router)
api_router.include_router(health.router)
