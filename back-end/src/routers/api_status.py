from fastapi import APIRouter

from config import get_settings


router = APIRouter()


@router.get("/api_status/")
async def api_status():
    settings = get_settings()
    return {"status": "ok", "app": settings.APP_NAME}
