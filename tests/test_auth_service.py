from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from bizsubs.modules.auth.schemas import LoginRequest, RegisterRequest
from bizsubs.modules.auth.service import AuthService, clear_auth_cache


def _user(user_id="user-1", email="owner@example.com"):
    return SimpleNamespace(id=user_id, email=email, user_metadata={"first_name": "Ada"}, created_at=None)


class FakeAuth:
    def __init__(self, error=None):
        self.error = error
        self.get_user_calls = 0
        self.signed_up = None

    def get_user(self, jwt):
        self.get_user_calls += 1
        if jwt == "bad":
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=_user())

    def sign_up(self, payload):
        if self.error:
            raise RuntimeError(self.error)
        self.signed_up = payload
        return SimpleNamespace(user=_user(email=payload["email"]))

    def sign_in_with_password(self, payload):
        if self.error:
            raise RuntimeError(self.error)
        return SimpleNamespace(user=_user(), session=SimpleNamespace(access_token="jwt-123"))

    def sign_out(self):
        return None


@pytest.fixture(autouse=True)
def _fresh_token_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


def _service(auth):
    return AuthService(SimpleNamespace(auth=auth))


def test_current_user_is_cached_per_token() -> None:
    auth = FakeAuth()
    service = _service(auth)

    assert service.get_current_user("tok")["id"] == "user-1"
    assert service.get_current_user("tok")["user_metadata"] == {"first_name": "Ada"}
    assert auth.get_user_calls == 1

    service.logout("tok")
    service.get_current_user("tok")
    assert auth.get_user_calls == 2


def test_invalid_token_is_unauthorized() -> None:
    with pytest.raises(HTTPException) as exc:
        _service(FakeAuth()).get_current_user("bad")
    assert exc.value.status_code == 401


def test_register_sends_names_and_confirm_link() -> None:
    auth = FakeAuth()
    response = _service(auth).register(
        RegisterRequest(email="ada@example.com", password="secret123", first_name="Ada")
    )
    assert response.email == "ada@example.com"
    assert auth.signed_up["options"]["data"] == {"first_name": "Ada"}
    assert auth.signed_up["options"]["email_redirect_to"].endswith("/auth/confirm")


def test_register_existing_user() -> None:
    with pytest.raises(HTTPException) as exc:
        _service(FakeAuth(error="User already registered")).register(
            RegisterRequest(email="ada@example.com", password="secret123")
        )
    assert exc.value.status_code == 400


def test_login() -> None:
    token = _service(FakeAuth()).login(LoginRequest(email="owner@example.com", password="pw"))
    assert token.access_token == "jwt-123"
    assert token.token_type == "bearer"

    with pytest.raises(HTTPException) as exc:
        _service(FakeAuth(error="Invalid login credentials")).login(LoginRequest(email="a@example.com", password="x"))
    assert exc.value.status_code == 401
