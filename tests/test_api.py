"""End-to-end HTTP behaviour through the FastAPI application."""

from conftest import DEFAULT_PASSWORD, bearer
from keyward.domain.models import AdminRole
from keyward.domain.ports.notifications import EmailTemplate

API = "/api/v1"


def _register_payload(**overrides):
    payload = {
        "email": "new@example.com",
        "password": "Passw0rd!",
        "firstName": "New",
        "lastName": "User",
        "phoneNumber": "5551234567",
    }
    payload.update(overrides)
    return payload


def _admin_tokens(client, email: str) -> dict:
    response = client.post(f"{API}/auth/admin/login", json={"email": email, "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    return response.json()["data"]["tokens"]


def test_health_reports_redis(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "redis": True}


def test_register_returns_created_envelope(client, email_sender):
    response = client.post(f"{API}/auth/user/register", json=_register_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["user"]["email"] == "new@example.com"
    assert body["data"]["user"]["emailVerified"] is False
    assert set(body["data"]["tokens"]) == {"accessToken", "refreshToken"}
    assert email_sender.count(EmailTemplate.EMAIL_VERIFICATION) == 1


def test_validation_failures_use_error_envelope(client):
    response = client.post(
        f"{API}/auth/user/register",
        json=_register_payload(email="not-an-email", password="short"),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["code"] == "VALIDATION_ERROR"
    fields = {error["field"] for error in body["errors"]}
    assert {"email", "password"} <= fields


def test_duplicate_registration_conflicts(client, user_factory):
    user_factory(email="new@example.com")

    response = client.post(f"{API}/auth/user/register", json=_register_payload())

    assert response.status_code == 409
    assert response.json()["message"] == "User with this email already exists."


def test_unverified_login_returns_null_tokens(client, user_factory, email_sender):
    user_factory(email="pending@example.com", verified=False)

    response = client.post(
        f"{API}/auth/user/login", json={"email": "pending@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Please verify your email first"
    assert body["data"]["emailVerified"] is False
    assert body["data"]["tokens"] is None
    assert email_sender.count(EmailTemplate.EMAIL_VERIFICATION) == 1


def test_login_then_profile_then_logout(client, user_factory):
    user = user_factory(email="jane@example.com")
    login = client.post(f"{API}/auth/user/login", json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})
    tokens = login.json()["data"]["tokens"]

    profile = client.get(f"{API}/users/me", headers=bearer(tokens["accessToken"]))
    assert profile.status_code == 200
    assert profile.json()["data"]["user"]["id"] == user.id

    logout = client.post(
        f"{API}/auth/user/logout",
        json={"refreshToken": tokens["refreshToken"]},
        headers=bearer(tokens["accessToken"]),
    )
    assert logout.status_code == 200
    assert logout.json() == {"status": "success", "message": "Logout successful", "data": None}

    rejected = client.get(f"{API}/users/me", headers=bearer(tokens["accessToken"]))
    assert rejected.status_code == 401
    assert rejected.json()["code"] == "TOKEN_REVOKED"

    refresh = client.post(f"{API}/auth/user/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert refresh.status_code == 401


def test_user_updates_profile_and_password(client, user_factory):
    user_factory(email="jane@example.com")
    login = client.post(f"{API}/auth/user/login", json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})
    headers = bearer(login.json()["data"]["tokens"]["accessToken"])

    updated = client.put(f"{API}/users/me", json={"firstName": "Janet"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["user"]["firstName"] == "Janet"

    wrong = client.put(
        f"{API}/users/me/password",
        json={"currentPassword": "WrongPass1", "newPassword": "BrandNew123"},
        headers=headers,
    )
    assert wrong.status_code == 400

    changed = client.put(
        f"{API}/users/me/password",
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "BrandNew123"},
        headers=headers,
    )
    assert changed.status_code == 200


def test_logout_without_tokens_succeeds(client):
    response = client.post(f"{API}/auth/user/logout", json={})

    assert response.status_code == 200


def test_missing_authorization_header(client):
    response = client.get(f"{API}/users/me")

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_HEADER_MISSING"


def test_password_reset_over_http(client, user_factory, email_sender):
    user_factory(email="jane@example.com")

    assert client.post(f"{API}/auth/user/forgot-password", json={"email": "jane@example.com"}).status_code == 200
    code = email_sender.last_code("jane@example.com", EmailTemplate.USER_PASSWORD_RESET)
    verified = client.post(f"{API}/auth/user/verify-reset-code", json={"email": "jane@example.com", "code": code})
    reset_token = verified.json()["data"]["resetToken"]

    reset = client.post(
        f"{API}/auth/user/reset-password",
        json={"resetToken": reset_token, "newPassword": "BrandNew123"},
    )
    assert reset.status_code == 200

    login = client.post(f"{API}/auth/user/login", json={"email": "jane@example.com", "password": "BrandNew123"})
    assert login.json()["data"]["tokens"] is not None


def test_non_ascii_digit_codes_are_rejected_as_validation_errors(client, user_factory):
    user_factory(email="jane@example.com")
    client.post(f"{API}/auth/user/forgot-password", json={"email": "jane@example.com"})

    for path, payload in (
        ("/auth/user/verify-reset-code", {"email": "jane@example.com", "code": "١٢٣٤٥٦"}),
        ("/auth/user/verify-email", {"email": "jane@example.com", "code": "١٢٣٤٥٦"}),
        ("/auth/admin/verify-code", {"email": "jane@example.com", "code": "١٢٣٤"}),
    ):
        response = client.post(f"{API}{path}", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


def test_moderator_cannot_create_admin(client, admin_factory):
    admin_factory(email="mod@example.com", role=AdminRole.MODERATOR)
    tokens = _admin_tokens(client, "mod@example.com")

    listing = client.get(f"{API}/admins", headers=bearer(tokens["accessToken"]))
    assert listing.status_code == 200

    response = client.post(
        f"{API}/admins",
        json={"email": "x@example.com", "password": "Passw0rd!", "firstName": "Xa", "lastName": "Ya"},
        headers=bearer(tokens["accessToken"]),
    )
    assert response.status_code == 401
    assert response.json()["code"] == "INSUFFICIENT_PERMISSIONS"


def test_admin_creates_lists_and_deletes(client, admin_factory):
    admin_factory(email="boss@example.com")
    headers = bearer(_admin_tokens(client, "boss@example.com")["accessToken"])

    created = client.post(
        f"{API}/admins",
        json={"email": "new@example.com", "password": "Passw0rd!", "firstName": "Ne", "lastName": "Wa"},
        headers=headers,
    )
    assert created.status_code == 201
    new_id = created.json()["data"]["admin"]["id"]

    listing = client.get(f"{API}/admins", params={"page": 1, "limit": 10}, headers=headers)
    assert listing.json()["data"]["pagination"] == {"page": 1, "limit": 10, "total": 2, "totalPages": 1}

    deleted = client.delete(f"{API}/admins/{new_id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"{API}/admins/{new_id}", headers=headers).status_code == 404


def test_deactivated_admin_token_is_revoked(client, admin_factory):
    admin_factory(email="boss@example.com")
    target = admin_factory(email="target@example.com")
    boss_headers = bearer(_admin_tokens(client, "boss@example.com")["accessToken"])
    target_headers = bearer(_admin_tokens(client, "target@example.com")["accessToken"])

    response = client.put(
        f"{API}/admins/{target.id}/status", params={"action": "deactivate"}, headers=boss_headers
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Admin deactivated successfully"

    me = client.get(f"{API}/admins/me", headers=target_headers)
    assert me.status_code == 401
    assert me.json()["message"] == "Admin tokens have been revoked."


def test_user_token_is_rejected_by_admin_routes(client, user_factory):
    user_factory(email="jane@example.com")
    login = client.post(f"{API}/auth/user/login", json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})

    response = client.get(f"{API}/admins/me", headers=bearer(login.json()["data"]["tokens"]["accessToken"]))

    assert response.status_code == 401


def test_unknown_route_uses_error_envelope(client):
    response = client.get(f"{API}/does-not-exist")

    assert response.status_code == 404
    assert response.json()["status"] == "error"
    assert response.json()["code"] == "NOT_FOUND"
