"""Клиент Cloudinary поверх REST API: загрузка и удаление медиафайлов."""

import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from cloudinary.utils import api_sign_request
from fastapi.concurrency import run_in_threadpool

from app.core.config import settings

logger = logging.getLogger(__name__)

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


@dataclass(frozen=True)
class MediaAsset:
    url: str
    public_id: str
    resource_type: str = "image"


def public_id_from_url(url: str) -> Optional[str]:
    """Извлекает public_id из URL вида .../upload/v123/<public_id>.<ext>"""
    if not url or "/upload/" not in url:
        return None

    path = url.split("/upload/", 1)[1]
    path = re.sub(r"^v\d+/", "", path)
    public_id = os.path.splitext(path)[0]
    return public_id or None


def _read_file(path: str) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()


class MediaHost:
    """Загрузка файлов с локального диска в Cloudinary"""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self._client = client
        self.timeout = timeout

    def _signed(self, params: Dict[str, str]) -> Dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {**params, "api_key": self.api_key, "signature": api_sign_request(params, self.api_secret)}

    async def _post(self, url: str, data: Dict[str, str], files=None) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, data=data, files=files)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, data=data, files=files)

    async def upload(self, local_path: Optional[str], resource_type: str = "auto") -> Optional[MediaAsset]:
        """Загружает файл и удаляет его локальную копию.

        Возвращает None, если путь пустой или загрузка не удалась.
        """
        if not local_path:
            return None

        url = f"{CLOUDINARY_API_URL}/{self.cloud_name}/{resource_type}/upload"
        try:
            content = await run_in_threadpool(_read_file, local_path)
            response = await self._post(
                url,
                data=self._signed({}),
                files={"file": (os.path.basename(local_path), content)}
            )
            response.raise_for_status()
            body = response.json()
            logger.info(f"File uploaded to media host: {body.get('public_id')}")
            return MediaAsset(
                url=body.get("secure_url") or body["url"],
                public_id=body["public_id"],
                resource_type=body.get("resource_type", "image")
            )
        except (httpx.RequestError, httpx.HTTPStatusError, KeyError, ValueError, OSError) as exc:
            logger.error(f"Media upload failed for {os.path.basename(local_path)}: {exc}")
            return None
        finally:
            if os.path.exists(local_path):
                os.remove(local_path)

    async def destroy(self, public_id: str, resource_type: str = "image") -> bool:
        """Удаляет загруженный ранее файл"""
        url = f"{CLOUDINARY_API_URL}/{self.cloud_name}/{resource_type}/destroy"
        try:
            response = await self._post(url, data=self._signed({"public_id": public_id}))
            response.raise_for_status()
            return response.json().get("result") == "ok"
        except (httpx.RequestError, httpx.HTTPStatusError, ValueError) as exc:
            logger.warning(f"Media destroy failed for {public_id}: {exc}")
            return False


def get_media_host() -> MediaHost:
    return MediaHost(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret
    )
