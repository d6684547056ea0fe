from fastapi import APIRouter

from app.core.responses import api_response

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Проверка доступности сервиса"""
    return api_response({"status": "ok"}, "OK")
