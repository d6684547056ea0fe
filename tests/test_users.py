# tests/test_users.py
import uuid

from app.db.repositories.user_repository import UserRepository
from conftest import API, AVATAR, COVER, add_video, bearer, login, register, subscribe


def new_session(client):
    profile = register(client).json()["data"]
    data = login(client, username=profile["username"]).json()["data"]
    return profile, bearer(data["accessToken"])


# --- Текущий пользователь и профиль ---

def test_current_user(client, user):
    r = client.get(f"{API}/users/current-user", headers=user["headers"])

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["id"] == user["profile"]["id"]
    assert "refreshToken" not in data


def test_current_user_from_cookie(client, user):
    client.cookies.clear()
    r = client.get(
        f"{API}/users/current-user",
        headers={"Cookie": f"accessToken={user['access_token']}"}
    )

    assert r.status_code == 200


def test_current_user_with_bad_token(client):
    client.cookies.clear()
    r = client.get(f"{API}/users/current-user", headers=bearer("garbage"))

    assert r.status_code == 401
    assert r.json()["message"] == "Invalid access token"


def test_update_account(client, user):
    suffix = uuid.uuid4().hex[:8]
    r = client.patch(
        f"{API}/users/update-account",
        json={"username": f"Renamed_{suffix}", "fullName": "New Name", "email": f"new_{suffix}@example.com"},
        headers=user["headers"]
    )

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["username"] == f"renamed_{suffix}"
    assert data["fullName"] == "New Name"
    assert data["email"] == f"new_{suffix}@example.com"
    assert "password" not in data


def test_update_account_requires_all_fields(client, user):
    r = client.patch(
        f"{API}/users/update-account",
        json={"fullName": "Only Name"},
        headers=user["headers"]
    )

    assert r.status_code == 400
    assert r.json()["message"] == "All fields are required"


def test_update_account_rejects_taken_email(client, user):
    other = register(client).json()["data"]

    r = client.patch(
        f"{API}/users/update-account",
        json={"username": user["profile"]["username"], "fullName": "X", "email": other["email"]},
        headers=user["headers"]
    )

    assert r.status_code == 409


def test_update_account_rejects_invalid_email(client, user):
    r = client.patch(
        f"{API}/users/update-account",
        json={"username": "someone", "fullName": "X", "email": "not-an-email"},
        headers=user["headers"]
    )

    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["errors"]


# --- Аватар и обложка ---

def test_update_avatar_replaces_and_cleans_up(client, user, media_host):
    old_avatar = user["profile"]["avatar"]

    r = client.patch(f"{API}/users/avatar", files={"avatar": AVATAR}, headers=user["headers"])

    assert r.status_code == 200
    new_avatar = r.json()["data"]["avatar"]
    assert new_avatar != old_avatar
    assert new_avatar == media_host.uploaded[-1].url
    old_public_id = old_avatar.split("/upload/v1700000000/", 1)[1].rsplit(".", 1)[0]
    assert old_public_id in media_host.destroyed


def test_update_avatar_requires_file(client, user):
    r = client.patch(f"{API}/users/avatar", headers=user["headers"])

    assert r.status_code == 400
    assert r.json()["message"] == "Avatar file is missing"


def test_update_avatar_upload_failure(client, user, media_host):
    media_host.fail = True

    r = client.patch(f"{API}/users/avatar", files={"avatar": AVATAR}, headers=user["headers"])

    assert r.status_code == 400


def test_update_avatar_survives_cleanup_failure(client, user, media_host):
    media_host.destroy_fails = True

    r = client.patch(f"{API}/users/avatar", files={"avatar": AVATAR}, headers=user["headers"])

    assert r.status_code == 200
    assert r.json()["data"]["avatar"] == media_host.uploaded[-1].url
    assert r.json()["data"]["avatar"] != user["profile"]["avatar"]


def test_update_cover_image(client, user, media_host):
    r = client.patch(f"{API}/users/cover-image", files={"coverImage": COVER}, headers=user["headers"])

    assert r.status_code == 200
    assert r.json()["data"]["coverImage"] == media_host.uploaded[-1].url


def test_update_cover_image_requires_file(client, user):
    r = client.patch(f"{API}/users/cover-image", headers=user["headers"])

    assert r.status_code == 400


# --- Профиль канала ---

def test_channel_profile_counts(client, run_db):
    channel, channel_headers = new_session(client)
    fan, fan_headers = new_session(client)
    other, _ = new_session(client)

    async def _subscribe(session):
        await subscribe(session, uuid.UUID(fan["id"]), uuid.UUID(channel["id"]))
        await subscribe(session, uuid.UUID(other["id"]), uuid.UUID(channel["id"]))
        await subscribe(session, uuid.UUID(channel["id"]), uuid.UUID(fan["id"]))

    run_db(_subscribe)

    r = client.get(f"{API}/users/c/{channel['username'].upper()}", headers=fan_headers)

    assert r.status_code == 200
    data = r.json()["data"]
    assert set(data) == {
        "id", "fullName", "username", "subscribersCount", "channelsSubscribedToCount",
        "isSubscribed", "avatar", "coverImage", "email"
    }
    assert data["subscribersCount"] == 2
    assert data["channelsSubscribedToCount"] == 1
    assert data["isSubscribed"] is True
    assert data["email"] == channel["email"]

    own = client.get(f"{API}/users/c/{channel['username']}", headers=channel_headers).json()["data"]
    assert own["isSubscribed"] is False


def test_channel_profile_not_found(client, user):
    r = client.get(f"{API}/users/c/nobody_{uuid.uuid4().hex[:6]}", headers=user["headers"])

    assert r.status_code == 404
    assert r.json()["message"] == "channel does not exist"


def test_channel_profile_blank_username(client, user):
    r = client.get(f"{API}/users/c/%20", headers=user["headers"])

    assert r.status_code == 400


# --- История просмотров ---

def test_watch_history_with_owner(client, run_db):
    owner, _ = new_session(client)
    viewer, viewer_headers = new_session(client)

    async def _seed(session):
        first = await add_video(
            session, uuid.UUID(owner["id"]), video_file="https://cdn/v1.mp4", thumbnail="https://cdn/t1.png",
            title="First", duration=12.5
        )
        second = await add_video(
            session, uuid.UUID(owner["id"]), video_file="https://cdn/v2.mp4", thumbnail="https://cdn/t2.png",
            title="Second", duration=30
        )
        users = UserRepository(session)
        await users.add_to_watch_history(uuid.UUID(viewer["id"]), second)
        await users.add_to_watch_history(uuid.UUID(viewer["id"]), first)
        return first, second

    first, second = run_db(_seed)

    r = client.get(f"{API}/users/history", headers=viewer_headers)

    assert r.status_code == 200
    history = r.json()["data"]
    assert [video["id"] for video in history] == [str(second), str(first)]
    assert [video["title"] for video in history] == ["Second", "First"]
    assert history[0]["owner"] == {
        "fullName": owner["fullName"],
        "username": owner["username"],
        "avatar": owner["avatar"],
    }

    me = client.get(f"{API}/users/current-user", headers=viewer_headers).json()["data"]
    assert me["watchHistory"] == [str(second), str(first)]


def test_watch_history_empty(client, user):
    r = client.get(f"{API}/users/history", headers=user["headers"])

    assert r.status_code == 200
    assert r.json()["data"] == []


# --- Общие ---

def test_health(client):
    r = client.get("/health")

    assert r.status_code == 200
    assert r.json()["data"] == {"status": "ok"}


def test_unknown_route_uses_error_envelope(client):
    r = client.get(f"{API}/nope")

    assert r.status_code == 404
    assert r.json()["success"] is False
    assert r.json()["statusCode"] == 404


def test_root_path_is_not_served(client):
    r = client.get("/")

    assert r.status_code == 404
    assert r.json() == {"statusCode": 404, "message": "Not Found", "success": False, "errors": []}
