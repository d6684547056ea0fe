import uuid
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import UnauthorizedError
from app.core.security import TokenService, extract_token_from_header, get_token_service
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User


def get_access_token(request: Request) -> Optional[str]:
    """Access-токен из cookie или заголовка Authorization"""
    return request.cookies.get("accessToken") or extract_token_from_header(
        request.headers.get("Authorization")
    )


async def get_current_user(
    token: Optional[str] = Depends(get_access_token),
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
) -> User:
    if not token:
        raise UnauthorizedError("Unauthorized request")

    try:
        payload = token_service.verify_access_token(token)
        user_uuid = uuid.UUID(payload["id"])
    except (UnauthorizedError, ValueError):
        raise UnauthorizedError("Invalid access token")

    user = await UserRepository(db).get_by_uuid(user_uuid)
    if not user:
        raise UnauthorizedError("Invalid access token")

    return user
