"""Integration tests for the device-bound ``?action=`` API."""
import pytest
from httpx import AsyncClient

DEVICE = "a1b2c3d4e5f6a7b8"
OTHER_DEVICE = "ffffeeee11112222"


async def _register(client: AsyncClient, username="alice", password="pw", android_id=DEVICE):
    return await client.post(
        "/api/users",
        params={"action": "register"},
        json={"username": username, "password": password, "androidId": android_id},
    )


async def _login(client: AsyncClient, username="alice", password="pw", android_id=DEVICE):
    return await client.post(
        "/api/users",
        params={"action": "login"},
        json={"username": username, "password": password, "androidId": android_id},
    )


@pytest.mark.asyncio
async def test_register_echoes_truncated_device(device_client: AsyncClient) -> None:
    response = await _register(device_client)
    assert response.status_code == 201
    assert response.json() == {
        "success": True,
        "message": "User berhasil didaftarkan",
        "username": "alice",
        "androidId": "a1b2c3d4...",
    }


@pytest.mark.asyncio
async def test_short_passwords_are_accepted(device_client: AsyncClient) -> None:
    response = await _register(device_client, password="1")
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_duplicate_registration_conflicts(device_client: AsyncClient) -> None:
    await _register(device_client)
    second = await _register(device_client, android_id=OTHER_DEVICE)
    assert second.status_code == 409
    assert second.json() == {"success": False, "error": "Username sudah terdaftar"}


@pytest.mark.asyncio
async def test_register_requires_device(device_client: AsyncClient) -> None:
    response = await device_client.post(
        "/api/users",
        params={"action": "register"},
        json={"username": "alice", "password": "pw"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Username, password, and androidId are required"


@pytest.mark.asyncio
async def test_login_succeeds_on_registered_device(device_client: AsyncClient) -> None:
    await _register(device_client)
    response = await _login(device_client)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Login berhasil", "username": "alice"}


@pytest.mark.asyncio
async def test_login_on_other_device_is_forbidden(device_client: AsyncClient) -> None:
    await _register(device_client)
    response = await _login(device_client, android_id=OTHER_DEVICE)
    assert response.status_code == 403
    assert response.json()["error"] == (
        "AKSES DITOLAK: Device tidak dikenali!\n\n"
        "Registered Device: a1b2c3d4...\n"
        "Current Device: ffffeeee..."
    )


@pytest.mark.asyncio
async def test_password_is_checked_before_device(device_client: AsyncClient) -> None:
    await _register(device_client)
    response = await _login(device_client, password="nope", android_id=OTHER_DEVICE)
    assert response.status_code == 401
    assert response.json()["error"] == "Password salah"


@pytest.mark.asyncio
async def test_unknown_user_is_not_found(device_client: AsyncClient) -> None:
    response = await _login(device_client, username="ghost")
    assert response.status_code == 404
    assert response.json()["error"] == "Username tidak ditemukan"


@pytest.mark.asyncio
async def test_all_maps_usernames_to_stored_passwords(device_client: AsyncClient) -> None:
    await _register(device_client, username="alice", password="pw-a")
    await _register(device_client, username="bob", password="pw-b")

    response = await device_client.get("/api/users", params={"action": "all"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["total"] == 2
    assert data["users"] == {"alice": "pw-a", "bob": "pw-b"}
    assert list(data["users"]) == ["bob", "alice"]


@pytest.mark.asyncio
async def test_android_id_lookup(device_client: AsyncClient) -> None:
    await _register(device_client)

    found = await device_client.get("/api/users", params={"action": "androidid", "username": "alice"})
    assert found.status_code == 200
    assert found.json() == {"success": True, "androidId": DEVICE}

    missing_param = await device_client.get("/api/users", params={"action": "androidid"})
    assert missing_param.status_code == 400
    assert missing_param.json()["error"] == "Username is required"

    unknown = await device_client.get("/api/users", params={"action": "androidid", "username": "ghost"})
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "User tidak ditemukan"


@pytest.mark.asyncio
async def test_connection_probe(device_client: AsyncClient) -> None:
    response = await device_client.get("/api/users", params={"action": "test"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Database connection successful"


@pytest.mark.asyncio
async def test_preflight_is_accepted(device_client: AsyncClient) -> None:
    response = await device_client.options("/api/users")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unknown_action_is_not_found(device_client: AsyncClient) -> None:
    response = await device_client.get("/api/users", params={"action": "drop"})
    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "API endpoint not found"
    assert data["message"] == "Endpoint tidak ditemukan: GET /api/users?action=drop"
    assert "POST /api/users?action=login" in data["availableEndpoints"]


@pytest.mark.asyncio
async def test_hashed_routes_are_not_mounted(device_client: AsyncClient) -> None:
    response = await device_client.post("/api/register", json={"username": "a", "password": "b"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_store_failure_keeps_operation_message(offline_device_client: AsyncClient) -> None:
    response = await _login(offline_device_client)
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Gagal validasi login"
    assert data["details"]
