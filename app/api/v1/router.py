from fastapi import APIRouter

from app.media.router import router as media_router

api_router = APIRouter(prefix="/v1")


# Chat Attachment Routers
api_router.include_router(router=media_router)
