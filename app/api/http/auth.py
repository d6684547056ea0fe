import os
from typing import Optional

from fastapi import APIRouter, Body, Cookie, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.db import get_db
from app.core.responses import api_response
from app.core.security import TokenPair, TokenService, get_token_service
from app.domains.identity.entities import User
from app.domains.identity.schemas import (
    UserLogin, UserResponse, Token, LoginResponse, PasswordChange, RefreshRequest
)
from app.domains.identity.services import IdentityService
from app.domains.identity.sessions import SessionService
from app.infrastructure.media import MediaHost, get_media_host, stage_upload

router = APIRouter(prefix="/auth", tags=["authentication"])

SESSION_COOKIES = ("accessToken", "refreshToken")


def set_session_cookies(response: JSONResponse, tokens: TokenPair) -> JSONResponse:
    """Обе cookie всегда httpOnly + secure"""
    response.set_cookie("accessToken", tokens.access_token, httponly=True, secure=True)
    response.set_cookie("refreshToken", tokens.refresh_token, httponly=True, secure=True)
    return response


def clear_session_cookies(response: JSONResponse) -> JSONResponse:
    for key in SESSION_COOKIES:
        response.delete_cookie(key, httponly=True, secure=True)
    return response


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    username: Optional[str] = Form(None),
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[EmailStr] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    """Регистрация нового пользователя"""
    avatar_path = await stage_upload(avatar, settings.upload_temp_dir)
    cover_image_path = await stage_upload(cover_image, settings.upload_temp_dir)

    try:
        identity_service = IdentityService(db, media_host)
        user = await identity_service.register_user(
            username=username,
            email=email,
            full_name=full_name,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_image_path
        )
    finally:
        # файлы, не дошедшие до загрузки, не должны оставаться на диске
        for path in (avatar_path, cover_image_path):
            if path and os.path.exists(path):
                os.remove(path)

    return api_response(
        UserResponse.from_entity(user),
        "User registered successfully",
        status.HTTP_201_CREATED
    )


@router.post("/login")
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Вход пользователя"""
    session_service = SessionService(db, token_service)
    user, tokens = await session_service.login(login_data)

    response = api_response(
        LoginResponse(
            user=UserResponse.from_entity(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token
        ),
        "User logged in successfully"
    )
    return set_session_cookies(response, tokens)


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Выход пользователя"""
    await SessionService(db, token_service).logout(current_user)
    return clear_session_cookies(api_response({}, "User logged out"))


@router.post("/refresh-token")
async def refresh_token(
    body: Optional[RefreshRequest] = Body(None),
    refresh_cookie: Optional[str] = Cookie(None, alias="refreshToken"),
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Обновление пары токенов; cookie приоритетнее тела запроса"""
    incoming_token = refresh_cookie or (body.refresh_token if body else None)

    tokens = await SessionService(db, token_service).refresh(incoming_token)

    response = api_response(
        Token(access_token=tokens.access_token, refresh_token=tokens.refresh_token),
        "Access token refreshed"
    )
    return set_session_cookies(response, tokens)


@router.post("/change-password")
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Смена пароля"""
    await IdentityService(db).change_current_password(
        current_user, password_data.old_password, password_data.new_password
    )
    return api_response({}, "Password changed successfully")
