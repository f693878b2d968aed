from fastapi import APIRouter

from .endpoints.health import router as health_router
from .endpoints.profiles import router as profiles_router
from .endpoints.scores import router as scores_router

api_router = APIRouter()


@api_router.get("/")
async def root():
    return {"message": "CodeScore API is running"}


api_router.include_router(health_router)
api_router.include_router(profiles_router)
api_router.include_router(scores_router)
