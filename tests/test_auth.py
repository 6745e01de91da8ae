# tests/test_auth.py
import pytest
import requests

from racikpc.auth import AuthSession
from racikpc.errors import AuthError

TOKEN_BODY = {
    "access_token": "tok-123",
    "refresh_token": "ref-456",
    "user": {"id": "u-1", "email": "admin@npc.id", "user_metadata": {"role": "admin"}},
}


def _make_auth(session):
    return AuthSession("https://proj.supabase.co", "anon", session=session)


def test_login_success(fake_session, fake_response):
    session = fake_session([fake_response(200, TOKEN_BODY)])
    auth = _make_auth(session)

    user = auth.login("admin@npc.id", "secret")

    assert user.username == "admin"
    assert auth.is_authenticated
    assert auth.is_admin
    assert auth.access_token == "tok-123"
    call = session.calls[0]
    assert call["url"] == "https://proj.supabase.co/auth/v1/token"
    assert call["params"] == {"grant_type": "password"}
    assert call["json"] == {"email": "admin@npc.id", "password": "secret"}


def test_login_bad_credentials(fake_session, fake_response):
    session = fake_session([fake_response(400, {"error": "invalid_grant",
                                                "error_description": "Invalid login credentials"})])
    auth = _make_auth(session)

    with pytest.raises(AuthError, match="Invalid login credentials"):
        auth.login("someone@npc.id", "wrong")
    assert auth.current_user() is None


def test_login_requires_email_and_password(fake_session):
    auth = _make_auth(fake_session())
    with pytest.raises(AuthError):
        auth.login("", "x")


def test_login_network_error(fake_session):
    auth = _make_auth(fake_session([requests.exceptions.ConnectionError("down")]))
    with pytest.raises(AuthError):
        auth.login("a@b.c", "x")


def test_restore_from_token(fake_session, fake_response):
    session = fake_session([fake_response(200, {"id": "u-2", "email": "budi@npc.id"})])
    auth = _make_auth(session)

    user = auth.restore("tok-abc")

    assert user.username == "budi"
    assert not auth.is_admin
    assert session.calls[0]["headers"]["Authorization"] == "Bearer tok-abc"


def test_restore_invalid_token(fake_session, fake_response):
    auth = _make_auth(fake_session([fake_response(401, {"msg": "invalid JWT"})]))
    assert auth.restore("expired") is None
    assert not auth.is_authenticated


def test_restore_without_token_makes_no_request(fake_session):
    session = fake_session()
    assert _make_auth(session).restore(None) is None
    assert session.calls == []


def test_logout_clears_state_even_if_request_fails(fake_session, fake_response):
    session = fake_session([
        fake_response(200, TOKEN_BODY),
        requests.exceptions.ConnectionError("down"),
    ])
    auth = _make_auth(session)
    auth.login("admin@npc.id", "secret")

    auth.logout()

    assert auth.current_user() is None
    assert auth.access_token is None
    assert session.calls[1]["url"].endswith("/auth/v1/logout")
