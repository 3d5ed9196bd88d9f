"""
Tests for user forms, role labels, permission selection and the users pages.
"""

from __future__ import annotations

import pytest

from conftest import API, make_user
from station_admin.components.users.service import (
    add_all_filtered,
    build_user_payload,
    group_by_resource,
    override_permission_ids,
    remove_all_filtered,
    role_label,
    toggle_permission,
)

ROLES = [
    {"id": 1, "name": "admin", "Permissions": [{"id": 1}, {"id": 2}]},
    {"id": 2, "name": "manager", "Permissions": [{"id": 3}]},
]
PERMISSIONS = [
    {"id": 1, "name": "users:manage", "resource": "users", "description": "Manage users"},
    {"id": 2, "name": "users:delete", "resource": "users", "description": "Delete users"},
    {"id": 3, "name": "stations:read_stations", "resource": "stations", "description": "Read stations"},
]
USERS = [
    {"id": 5, "username": "bob", "email": "bob@x.com", "roleId": 2, "Role": {"id": 2, "name": "manager"},
     "permissions": [{"id": 2, "UserPermission": {"override": True}}, {"id": 3, "UserPermission": {"override": False}}]},
    {"id": 6, "username": "carol", "email": "carol@x.com", "roleId": 9},
    {"id": 7, "username": "dave", "email": "dave@x.com"},
]


class TestUserPayload:
    def test_create_requires_password(self) -> None:
        with pytest.raises(ValueError, match="password"):
            build_user_payload({"username": "bob", "email": "bob@x.com"}, require_password=True)

    def test_update_drops_empty_password(self) -> None:
        payload = build_user_payload({"username": "bob", "email": "bob@x.com", "password": "", "roleId": "2"},
                                     require_password=False)
        assert payload == {"username": "bob", "email": "bob@x.com", "roleId": 2}

    def test_invalid_role(self) -> None:
        with pytest.raises(ValueError, match="Please select a valid role"):
            build_user_payload({"username": "bob", "email": "b@x.com", "roleId": "abc"}, require_password=False)


class TestRoleLabel:
    def test_labels(self) -> None:
        assert role_label(USERS[0], ROLES) == "manager"
        assert role_label(USERS[1], ROLES) == "Unknown Role"
        assert role_label(USERS[2], ROLES) == "No Role"
        assert role_label({"roleId": 1}, ROLES) == "admin"


class TestPermissionSelection:
    def test_toggle(self) -> None:
        assert toggle_permission([1, 2], 2) == [1]
        assert toggle_permission([1], 3) == [1, 3]

    def test_add_and_remove_filtered(self) -> None:
        users_permissions = PERMISSIONS[:2]
        assert add_all_filtered([3], users_permissions) == [3, 1, 2]
        assert add_all_filtered([1], users_permissions) == [1, 2]
        assert remove_all_filtered([1, 2, 3], users_permissions) == [3]

    def test_group_by_resource(self) -> None:
        grouped = group_by_resource(PERMISSIONS)
        assert list(grouped) == ["users", "stations"]
        assert [p["id"] for p in grouped["users"]] == [1, 2]

    def test_override_ids(self) -> None:
        assert override_permission_ids(USERS[0]) == [2]
        assert override_permission_ids(USERS[2]) == []


@pytest.fixture
def users_backend(backend):
    backend.add("GET", f"{API}/users", USERS)
    backend.add("GET", f"{API}/roles", ROLES)
    backend.add("GET", f"{API}/permissions", PERMISSIONS)
    return backend


class TestUserRoutes:
    def test_users_tab(self, client, login_as, admin_user, users_backend) -> None:
        login_as(admin_user)
        response = client.get("/users")
        assert response.status_code == 200
        assert b"bob@x.com" in response.data
        assert b"Unknown Role" in response.data
        assert b"No Role" in response.data

    def test_create_user_needs_create_permission(self, client, login_as, users_backend) -> None:
        login_as(make_user(permissions=["users:read"]))
        response = client.post("/users", data={"username": "x"})
        assert response.status_code == 403

        login_as(make_user(permissions=["users:manage"]))
        users_backend.add("POST", f"{API}/users", {"id": 8})
        client.post("/users", data={"username": "erin", "email": "erin@x.com", "password": "pw", "roleId": "2"})
        assert users_backend.calls_to("POST", f"{API}/users")[0]["json"]["roleId"] == 2

    def test_update_without_password(self, client, login_as, admin_user, users_backend) -> None:
        login_as(admin_user)
        users_backend.add("PUT", f"{API}/users/5", {"id": 5})

        client.post("/users/5/edit", data={"username": "bob", "email": "bob@x.com", "password": "", "roleId": "2"})

        assert "password" not in users_backend.calls_to("PUT", f"{API}/users/5")[0]["json"]

    def test_role_selection_is_kept_until_saved(self, client, login_as, admin_user, users_backend) -> None:
        login_as(admin_user)
        users_backend.add("PUT", f"{API}/roles/2/permissions", {})

        client.post("/users/roles/2/selection", data={"op": "toggle", "permission_id": "1"})
        client.post("/users/roles/2/selection", data={"op": "add_filtered", "q": "delete"})
        assert users_backend.calls_to("PUT", f"{API}/roles/2/permissions") == []

        client.post("/users/roles/2/permissions")

        call = users_backend.calls_to("PUT", f"{API}/roles/2/permissions")[0]
        assert call["json"] == {"permissions": [3, 1, 2]}
        with client.session_transaction() as sess:
            assert "2" not in sess["role_selection"]

    def test_roles_tab_shows_selection(self, client, login_as, admin_user, users_backend) -> None:
        login_as(admin_user)
        response = client.get("/users?tab=roles&role=1")
        assert b"Permissions for admin" in response.data
        assert b"2 of 3 selected" in response.data

    def test_save_user_overrides(self, client, login_as, admin_user, users_backend) -> None:
        login_as(admin_user)
        users_backend.add("PUT", f"{API}/users/5/permissions", {})

        response = client.post("/users/5/permissions", data={"permissions": ["1", "3"], "username": "bob"})

        assert "tab=overrides" in response.headers["Location"]
        assert users_backend.calls_to("PUT", f"{API}/users/5/permissions")[0]["json"] == {"permissions": [1, 3]}
        with client.session_transaction() as sess:
            assert ("success", "Permissions updated for bob") in sess["_flashes"]

    def test_overrides_tab(self, client, login_as, admin_user, users_backend) -> None:
        login_as(admin_user)
        response = client.get("/users?tab=overrides&user=5")
        assert b"Permission overrides for bob" in response.data
        assert b"Read stations" in response.data
