import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.models import Role, User
from staffpanel.core.config import settings

from conftest import DEFAULT_PASSWORD, make_user


async def _create_role(admin_client: AsyncClient, name: str = "Designer", color: str = "#3b82f6") -> dict:
    response = await admin_client.post("/api/roles", json={"name": name, "color": color})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_list_roles(admin_client: AsyncClient, staff_client: AsyncClient) -> None:
    await _create_role(admin_client, "Writer", "#fff")
    await _create_role(admin_client, "Analyst", "#10b981")

    response = await staff_client.get("/api/roles")
    assert response.status_code == 200
    assert [r["name"] for r in response.json()] == ["Analyst", "Writer"]


@pytest.mark.asyncio
async def test_role_validation_and_duplicates(admin_client: AsyncClient) -> None:
    bad = await admin_client.post("/api/roles", json={"name": "Ops", "color": "blue"})
    assert bad.status_code == 422

    await _create_role(admin_client, "Ops")
    dup = await admin_client.post("/api/roles", json={"name": "Ops", "color": "#000000"})
    assert dup.status_code == 400
    assert dup.json()["detail"] == "A role with this name already exists"


@pytest.mark.asyncio
async def test_role_management_is_admin_only(staff_client: AsyncClient, admin_client: AsyncClient) -> None:
    assert (await staff_client.post("/api/roles", json={"name": "X", "color": "#000"})).status_code == 403

    role = await _create_role(admin_client)
    assert (await staff_client.delete(f"/api/roles/{role['id']}")).status_code == 403


@pytest.mark.asyncio
async def test_assign_role_shows_badge(
    admin_client: AsyncClient, staff_client: AsyncClient, staff: User
) -> None:
    role = await _create_role(admin_client)

    response = await admin_client.patch(f"/api/users/{staff.id}/role", json={"roleId": role["id"]})
    assert response.status_code == 200

    me = (await staff_client.get("/api/user")).json()
    assert me["roleId"] == role["id"]
    assert me["role"] == {"id": role["id"], "name": "Designer", "color": "#3b82f6"}

    # null clears the badge
    await admin_client.patch(f"/api/users/{staff.id}/role", json={"roleId": None})
    assert (await staff_client.get("/api/user")).json()["role"] is None


@pytest.mark.asyncio
async def test_assign_role_unknown_targets(admin_client: AsyncClient, staff: User) -> None:
    missing_user = await admin_client.patch("/api/users/9999/role", json={"roleId": None})
    assert missing_user.status_code == 404

    missing_role = await admin_client.patch(f"/api/users/{staff.id}/role", json={"roleId": 9999})
    assert missing_role.status_code == 404
    assert missing_role.json()["detail"] == "Role not found"


@pytest.mark.asyncio
async def test_assign_role_requires_admin(staff_client: AsyncClient, staff: User) -> None:
    response = await staff_client.patch(f"/api/users/{staff.id}/role", json={"roleId": None})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_role_detaches_every_holder(
    admin_client: AsyncClient, db_session: AsyncSession
) -> None:
    role = await _create_role(admin_client)
    holders = [await make_user(db_session, f"holder{i}") for i in range(3)]
    for user in holders:
        await admin_client.patch(f"/api/users/{user.id}/role", json={"roleId": role["id"]})

    response = await admin_client.delete(f"/api/roles/{role['id']}")
    assert response.status_code == 200

    result = await db_session.execute(
        select(User)
        .where(User.id.in_([u.id for u in holders]))
        .execution_options(populate_existing=True)
    )
    assert [u.role_id for u in result.scalars().all()] == [None, None, None]
    assert (await db_session.execute(select(Role))).scalars().all() == []

    users = (await admin_client.get("/api/users")).json()
    assert all(u["role"] is None for u in users)


@pytest.mark.asyncio
async def test_delete_unknown_role(admin_client: AsyncClient) -> None:
    response = await admin_client.delete("/api/roles/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_users_newest_first(
    admin: User, staff: User, staff_client: AsyncClient
) -> None:
    response = await staff_client.get("/api/users")
    assert response.status_code == 200
    data = response.json()
    assert [u["id"] for u in data] == [staff.id, admin.id]
    assert all("passwordHash" not in u for u in data)


@pytest.mark.asyncio
async def test_update_profile_fields(staff_client: AsyncClient) -> None:
    response = await staff_client.patch(
        "/api/user/profile", data={"name": "Alice Renamed", "email": "alice.new@example.com"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Alice Renamed"
    assert data["email"] == "alice.new@example.com"
    assert data["avatar"] is None


@pytest.mark.asyncio
async def test_update_profile_rejects_bad_email(staff_client: AsyncClient) -> None:
    response = await staff_client.patch("/api/user/profile", data={"email": "nope"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_profile_avatar_upload(staff_client: AsyncClient, upload_dir) -> None:
    response = await staff_client.patch(
        "/api/user/profile",
        files={"avatar": ("me.png", b"\x89PNG fake image bytes", "image/png")},
    )
    assert response.status_code == 200
    avatar = response.json()["avatar"]
    assert avatar.startswith("/uploads/")
    assert avatar.endswith(".png")
    assert (upload_dir / avatar.rsplit("/", 1)[1]).read_bytes() == b"\x89PNG fake image bytes"


@pytest.mark.asyncio
async def test_update_profile_rejects_non_media(staff_client: AsyncClient, upload_dir) -> None:
    response = await staff_client.patch(
        "/api/user/profile",
        files={"avatar": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Only images and videos are allowed"
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_change_password(staff_client: AsyncClient, client: AsyncClient) -> None:
    wrong = await staff_client.post(
        "/api/user/change-password",
        json={"oldPassword": "nope", "newPassword": "BrandNew456"},
    )
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "Current password is incorrect"

    ok = await staff_client.post(
        "/api/user/change-password",
        json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "BrandNew456"},
    )
    assert ok.status_code == 200

    old_login = await client.post("/api/login", json={"username": "alice", "password": DEFAULT_PASSWORD})
    assert old_login.status_code == 401
    new_login = await client.post("/api/login", json={"username": "alice", "password": "BrandNew456"})
    assert new_login.status_code == 200


@pytest.mark.asyncio
async def test_oversized_avatar_leaves_no_file(staff_client: AsyncClient, upload_dir, monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_upload_bytes", 16)
    response = await staff_client.patch(
        "/api/user/profile",
        files={"avatar": ("big.png", b"x" * 64, "image/png")},
    )
    assert response.status_code == 400
    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_rejected_profile_update_removes_avatar(staff_client: AsyncClient, upload_dir) -> None:
    response = await staff_client.patch(
        "/api/user/profile",
        data={"email": "not-an-email"},
        files={"avatar": ("me.png", b"png bytes", "image/png")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid email address"
    assert list(upload_dir.iterdir()) == []

    me = (await staff_client.get("/api/user")).json()
    assert me["avatar"] is None


@pytest.mark.asyncio
async def test_blank_role_name_rejected(admin_client: AsyncClient) -> None:
    response = await admin_client.post("/api/roles", json={"name": "   ", "color": "#000000"})
    assert response.status_code == 422

    role = await _create_role(admin_client, "  Support  ")
    assert role["name"] == "Support"
