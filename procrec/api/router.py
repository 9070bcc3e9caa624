from fastapi import APIRouter

from .endpoints import health, recorder

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(recorder.router)
