# tests/conftest.py
import os
import shutil
import tempfile
import uuid

# Настройки должны попасть в окружение до импорта приложения
TEST_DIR = tempfile.mkdtemp(prefix="videotube-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DIR}/test.db"
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
os.environ["UPLOAD_TEMP_DIR"] = os.path.join(TEST_DIR, "uploads")

import pytest
from fastapi.testclient import TestClient

from app.core.db import SessionLocal
from app.db.models import Subscription, Video
from app.infrastructure.media import MediaAsset, get_media_host
from app.main import app

API = "/api/v1"
PASSWORD = "Secret123"
AVATAR = ("avatar.png", b"\x89PNG\r\n\x1a\nfake-avatar", "image/png")
COVER = ("cover.jpg", b"\xff\xd8\xfffake-cover", "image/jpeg")


class FakeMediaHost:
    """Медиа-хост в памяти: выдаёт URL в формате Cloudinary"""

    def __init__(self):
        self.uploaded = []
        self.destroyed = []
        self.fail = False
        self.destroy_fails = False

    async def upload(self, local_path, resource_type="auto"):
        if not local_path:
            return None
        os.remove(local_path)
        if self.fail:
            return None
        public_id = f"videotube/{uuid.uuid4().hex}"
        asset = MediaAsset(
            url=f"https://res.cloudinary.com/demo/image/upload/v1700000000/{public_id}.png",
            public_id=public_id
        )
        self.uploaded.append(asset)
        return asset

    async def destroy(self, public_id, resource_type="image"):
        self.destroyed.append(public_id)
        return not self.destroy_fails


@pytest.fixture(scope="session")
def media_host():
    return FakeMediaHost()


@pytest.fixture(scope="session")
def client(media_host):
    app.dependency_overrides[get_media_host] = lambda: media_host
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    shutil.rmtree(TEST_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_media_host(media_host):
    media_host.fail = False
    media_host.destroy_fails = False
    yield


@pytest.fixture
def run_db(client):
    """Выполняет корутину fn(session) в цикле событий приложения"""
    def _run(fn, *args):
        async def _call():
            async with SessionLocal() as session:
                return await fn(session, *args)
        return client.portal.call(_call)
    return _run


async def add_video(session, owner_uuid, **fields):
    video = Video(owner_id=owner_uuid, **fields)
    session.add(video)
    await session.commit()
    return video.uuid


async def subscribe(session, subscriber_uuid, channel_uuid):
    session.add(Subscription(subscriber_id=subscriber_uuid, channel_id=channel_uuid))
    await session.commit()


def register(client, with_avatar=True, with_cover=False, **fields):
    suffix = uuid.uuid4().hex[:10]
    data = {
        "username": f"user_{suffix}",
        "fullName": f"User {suffix}",
        "email": f"user_{suffix}@example.com",
        "password": PASSWORD,
    }
    data.update(fields)
    files = {}
    if with_avatar:
        files["avatar"] = AVATAR
    if with_cover:
        files["coverImage"] = COVER
    return client.post(f"{API}/auth/register", data=data, files=files or None)


def login(client, password=PASSWORD, **identifier):
    client.cookies.clear()
    return client.post(f"{API}/auth/login", json={**identifier, "password": password})


def refresh(client, refresh_token=None, cookie=None):
    client.cookies.clear()
    headers = {"Cookie": f"refreshToken={cookie}"} if cookie else None
    body = {"refreshToken": refresh_token} if refresh_token else None
    return client.post(f"{API}/auth/refresh-token", json=body, headers=headers)


def bearer(access_token):
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def user(client):
    """Зарегистрированный и вошедший пользователь"""
    r_register = register(client)
    assert r_register.status_code == 201, r_register.text
    profile = r_register.json()["data"]

    r_login = login(client, username=profile["username"])
    assert r_login.status_code == 200, r_login.text
    data = r_login.json()["data"]

    return {
        "profile": profile,
        "access_token": data["accessToken"],
        "refresh_token": data["refreshToken"],
        "headers": bearer(data["accessToken"]),
    }
