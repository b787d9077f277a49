from fastapi import APIRouter

from studybuddy.api.v1.endpoints import chat, profile, study

api_router = APIRouter()
api_router.include_router(profile.router, tags=["Profile"])
api_router.include_router(study.router, tags=["Study"])
api_router.include_router(chat.router, tags=["Tutor"])
