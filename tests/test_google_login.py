import pytest

from conftest import bearer
from keyward.application.security import google_identity
from keyward.application.security.google_identity import GoogleIdentity, GoogleTokenError
from keyward.core.app_factory import build_container
from keyward.core.errors import AuthError, AuthErrorCode
from keyward.domain.models import AccountStatus

API = "/api/v1"
CLIENT_ID = "web-client.apps.googleusercontent.com"

GOOGLE_TOKENS = {
    "token-new": {"email": "New.Person@Gmail.com", "name": "New Person", "email_verified": True},
    "token-jane": {"email": "jane@example.com", "name": "Jane Doe", "email_verified": True},
    "token-unverified": {"email": "shady@example.com", "name": "Shady", "email_verified": False},
    "token-nameless": {"email": "nameless@example.com", "email_verified": True},
}


@pytest.fixture(autouse=True)
def google_tokens(monkeypatch, settings):
    audiences = []

    def fake_verify(token, request, audience):
        audiences.append(audience)
        if token not in GOOGLE_TOKENS:
            raise ValueError("Wrong number of segments in token")
        return GOOGLE_TOKENS[token]

    monkeypatch.setattr(google_identity.id_token, "verify_oauth2_token", fake_verify)
    settings.google_client_id = CLIENT_ID
    return audiences


@pytest.mark.asyncio
async def test_first_google_login_creates_verified_passwordless_user(container, google_tokens):
    user, tokens, is_new_user = await container.user_auth_service.login_with_google("token-new")

    assert is_new_user is True
    assert user.email == "new.person@gmail.com"
    assert user.first_name == "New"
    assert user.last_name == "Person"
    assert user.password_hash is None
    assert user.email_verified is True
    assert container.token_service.verify_access(tokens.access_token).sub == user.id
    assert google_tokens == [CLIENT_ID]

    again, _, is_new_again = await container.user_auth_service.login_with_google("token-new")
    assert again.id == user.id
    assert is_new_again is False


@pytest.mark.asyncio
async def test_google_login_verifies_existing_account(container, user_factory):
    existing = user_factory(email="jane@example.com", verified=False)

    user, _, is_new_user = await container.user_auth_service.login_with_google("token-jane")

    assert is_new_user is False
    assert user.id == existing.id
    assert user.email_verified is True
    assert user.password_hash == existing.password_hash


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "deleted", "code"),
    [
        (AccountStatus.DEACTIVATED, False, AuthErrorCode.ACCOUNT_INACTIVE),
        (AccountStatus.ACTIVE, True, AuthErrorCode.ACCOUNT_GONE),
    ],
)
async def test_google_login_rejects_unusable_accounts(container, user_factory, status, deleted, code):
    user_factory(email="jane@example.com", status=status, deleted=deleted)

    with pytest.raises(AuthError) as excinfo:
        await container.user_auth_service.login_with_google("token-jane")
    assert excinfo.value.status_code == 401
    assert excinfo.value.code == code


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["garbage", "token-unverified", "token-nameless"])
async def test_rejected_google_token_is_unauthorized(container, token):
    with pytest.raises(AuthError) as excinfo:
        await container.user_auth_service.login_with_google(token)
    assert excinfo.value.status_code == 401
    assert excinfo.value.code == AuthErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_google_login_requires_client_id(settings, database, redis_client, email_sender):
    settings.google_client_id = None
    container = build_container(settings, database, redis_client, email_sender=email_sender)

    with pytest.raises(AuthError) as excinfo:
        await container.user_auth_service.login_with_google("token-new")
    assert excinfo.value.status_code == 400
    assert "not configured" in excinfo.value.message


@pytest.mark.asyncio
async def test_google_only_account_cannot_use_password_flows(container):
    user, _, _ = await container.user_auth_service.login_with_google("token-new")

    with pytest.raises(AuthError) as excinfo:
        await container.user_auth_service.login("new.person@gmail.com", "Passw0rd!")
    assert excinfo.value.code == AuthErrorCode.INVALID_CREDENTIALS
    assert "appropriate login method" in excinfo.value.message

    with pytest.raises(AuthError) as excinfo:
        await container.user_service.change_password(user.id, "Passw0rd!", "Newpass123")
    assert excinfo.value.status_code == 400


def test_single_word_name_leaves_last_name_empty():
    identity = GoogleIdentity.from_claims({"email": "X@Example.com", "name": " Cher "})

    assert identity.email == "x@example.com"
    assert identity.first_name == "Cher"
    assert identity.last_name == ""

    with pytest.raises(GoogleTokenError):
        GoogleIdentity.from_claims({"email": "", "name": "Nobody"})


def test_google_endpoint(client):
    response = client.post(f"{API}/auth/user/google", json={"idToken": "token-new"})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Google login successful"
    assert body["data"]["isNewUser"] is True
    assert body["data"]["user"]["emailVerified"] is True

    me = client.get(f"{API}/users/me", headers=bearer(body["data"]["tokens"]["accessToken"]))
    assert me.status_code == 200

    rejected = client.post(f"{API}/auth/user/google", json={"idToken": "garbage"})
    assert rejected.status_code == 401
    assert rejected.json()["code"] == AuthErrorCode.INVALID_TOKEN.value

    missing = client.post(f"{API}/auth/user/google", json={"idToken": ""})
    assert missing.status_code == 400
