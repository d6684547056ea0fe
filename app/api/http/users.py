import os
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.db import get_db
from app.core.responses import api_response
from app.domains.channels.services import ChannelService
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserResponse, UserUpdate
from app.domains.identity.services import IdentityService
from app.infrastructure.media import MediaHost, get_media_host, stage_upload

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/current-user")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Информация о текущем пользователе"""
    return api_response(UserResponse.from_entity(current_user), "Current user fetched successfully")


@router.patch("/update-account")
async def update_account(
    update_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Обновление информации о текущем пользователе"""
    user = await IdentityService(db).update_account_details(current_user, update_data)
    return api_response(UserResponse.from_entity(user), "Account details updated successfully")


@router.patch("/avatar")
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    """Замена аватара"""
    avatar_path = await stage_upload(avatar, settings.upload_temp_dir)
    try:
        user = await IdentityService(db, media_host).update_avatar(current_user, avatar_path)
    finally:
        if avatar_path and os.path.exists(avatar_path):
            os.remove(avatar_path)

    return api_response(UserResponse.from_entity(user), "Avatar image updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    """Замена обложки канала"""
    cover_image_path = await stage_upload(cover_image, settings.upload_temp_dir)
    try:
        user = await IdentityService(db, media_host).update_cover_image(current_user, cover_image_path)
    finally:
        if cover_image_path and os.path.exists(cover_image_path):
            os.remove(cover_image_path)

    return api_response(UserResponse.from_entity(user), "Cover image updated successfully")


@router.get("/c/{username}")
async def get_channel_profile(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Профиль канала"""
    channel = await ChannelService(db).get_channel_profile(username, current_user)
    return api_response(channel, "User channel fetched successfully")


@router.get("/history")
async def get_watch_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """История просмотров текущего пользователя"""
    history = await ChannelService(db).get_watch_history(current_user)
    return api_response(history, "Watch history fetched successfully")
