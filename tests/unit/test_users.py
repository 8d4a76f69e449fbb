"""Unit tests for user provisioning, role lookup and password reset."""
import pytest

from s1provision.core.sentinelone import (
    ADMIN_ROLE,
    PasswordResetError,
    ResponseDecodeError,
    RoleNotFoundError,
    RoleService,
    UserProvisioningRequest,
    UserService,
    generate_password,
)
from s1provision.core.sentinelone.users import PASSWORD_ALPHABET, PASSWORD_LENGTH
from tests.conftest import envelope, role_obj, user_obj

ACCOUNT_ID = "acc-1"


def make_request(**overrides):
    base = dict(first_name="Alice", last_name="Smith", email_address="alice@example.com", role="Viewer")
    base.update(overrides)
    return UserProvisioningRequest(**base)


@pytest.fixture()
def service(client):
    return UserService(client)


def test_generate_password_is_alphanumeric():
    password = generate_password()

    assert len(password) == PASSWORD_LENGTH == 32
    assert all(char in PASSWORD_ALPHABET for char in password)
    assert generate_password() != password


def test_find_role_queries_account_scope(fake_api, client):
    fake_api.add("GET", "/rbac/roles", envelope(data=[role_obj()]))

    role = RoleService(client).find_role(ACCOUNT_ID, ADMIN_ROLE)

    assert role.id == "role-admin"
    assert role.predefined_role is True
    assert role.users_in_role == 2
    assert fake_api.calls[0].params == {"accountIds": ACCOUNT_ID, "name": "Admin", "limit": "1"}


def test_find_role_returns_none_when_absent(fake_api, client):
    fake_api.add("GET", "/rbac/roles", envelope(data=[]))

    assert RoleService(client).find_role(ACCOUNT_ID, ADMIN_ROLE) is None


def test_find_user_queries_by_email(fake_api, service):
    fake_api.add("GET", "/users", envelope(data=[user_obj()]))

    user = service.find_user("alice@example.com")

    assert user.id == "user-1"
    assert user.two_factor_status == "configured"
    assert fake_api.calls[0].params == {"email": "alice@example.com", "limit": "1"}


def test_new_user_is_created_with_requested_role(fake_api, service):
    fake_api.add("GET", "/users", envelope(data=[]))
    fake_api.add("GET", "/rbac/roles", envelope(data=[role_obj()]))
    fake_api.add("POST", "/users", envelope(data=user_obj(scope_roles=[{"id": ACCOUNT_ID, "roleName": "Viewer"}])))

    user = service.create_user(make_request(), ACCOUNT_ID)

    assert user.has_scope(ACCOUNT_ID)
    body = fake_api.calls_to("POST", "/users")[0].json["data"]
    assert body["email"] == "alice@example.com"
    assert body["fullName"] == "Alice Smith"
    assert body["scope"] == "account"
    assert body["scopeRoles"] == [{"id": ACCOUNT_ID, "roleName": "Viewer"}]
    assert body["twoFaEnabled"] is True
    assert len(body["password"]) == 32
    assert body["password"].isalnum()


def test_new_user_does_not_need_admin_role(fake_api, service):
    fake_api.add("GET", "/users", envelope(data=[]))
    fake_api.add("GET", "/rbac/roles", envelope(data=[]))
    fake_api.add("POST", "/users", envelope(data=user_obj()))

    service.create_user(make_request(), ACCOUNT_ID)

    assert len(fake_api.calls_to("POST", "/users")) == 1


def test_existing_user_with_account_scope_is_unchanged(fake_api, service):
    fake_api.add(
        "GET",
        "/users",
        envelope(data=[user_obj(scope_roles=[{"id": ACCOUNT_ID, "roleId": "r1", "roleName": "Viewer"}])]),
    )
    fake_api.add("GET", "/rbac/roles", envelope(data=[role_obj()]))

    user = service.create_user(make_request(), ACCOUNT_ID)

    assert user.id == "user-1"
    assert [c.method for c in fake_api.calls] == ["GET", "GET"]


def test_existing_user_is_granted_admin_in_account(fake_api, service):
    other = {"id": "acc-0", "roleId": "r0", "roleName": "Admin"}
    fake_api.add("GET", "/users", envelope(data=[user_obj(scope_roles=[other])]))
    fake_api.add("GET", "/rbac/roles", envelope(data=[role_obj()]))
    fake_api.add(
        "PUT",
        "/users/user-1",
        envelope(data=user_obj(scope_roles=[other, {"id": ACCOUNT_ID, "roleId": "role-admin", "roleName": "Admin"}])),
    )

    user = service.create_user(make_request(role="Viewer"), ACCOUNT_ID)

    assert user.has_scope(ACCOUNT_ID)
    body = fake_api.calls_to("PUT", "/users/user-1")[0].json["data"]
    assert body["scope"] == "account"
    assert body["scopeRoles"] == [
        other,
        {"id": ACCOUNT_ID, "roleId": "role-admin", "roleName": "Admin"},
    ]
    assert fake_api.calls_to("POST", "/users") == []


def test_existing_user_without_admin_role_fails(fake_api, service):
    fake_api.add("GET", "/users", envelope(data=[user_obj()]))
    fake_api.add("GET", "/rbac/roles", envelope(data=[]))

    with pytest.raises(RoleNotFoundError):
        service.create_user(make_request(), ACCOUNT_ID)

    assert fake_api.calls_to("PUT", "/users/user-1") == []


def test_reset_password_sends_filter(fake_api, service):
    fake_api.add("POST", "/users/login/send-reset-password-email", envelope(data={"affected": 1}))

    service.reset_user_password("user-1")

    call = fake_api.calls[0]
    assert call.json == {"filter": {"ids": ["user-1"]}}


@pytest.mark.parametrize("data", [{"affected": 0}, {}, None])
def test_reset_password_affecting_nobody_fails(fake_api, service, data):
    fake_api.add("POST", "/users/login/send-reset-password-email", envelope(data=data))

    with pytest.raises(PasswordResetError, match="user ID was not found"):
        service.reset_user_password("user-404")


@pytest.mark.parametrize("affected", ["several", [1]])
def test_reset_password_with_malformed_count_is_decode_error(fake_api, service, affected):
    fake_api.add("POST", "/users/login/send-reset-password-email", envelope(data={"affected": affected}))

    with pytest.raises(ResponseDecodeError, match="affected"):
        service.reset_user_password("user-1")
