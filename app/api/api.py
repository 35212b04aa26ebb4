from fastapi import APIRouter

from app.api.endpoints import feedback

api_router = APIRouter()
api_router.include_router(feedback.router, tags=["feedback"])
