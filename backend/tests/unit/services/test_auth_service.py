# tests/unit/services/test_auth_service.py
from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta

import pytest

from sherp_auth.services._shared.base import ServiceContext
from sherp_auth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenRevokedError,
)
from sherp_auth.services._shared.ports import InMemoryRevocationStore, StubTokenProvider
from sherp_auth.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from sherp_auth.services.auth.service import AuthService
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


# ------------------------------ Fixtures ---------------------------------- #
class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def service(clock) -> AuthService:
    """Build an AuthService wired to in-memory doubles."""
    return AuthService(
        token_provider=StubTokenProvider(),
        revocation_store=InMemoryRevocationStore(clock=clock),
    )


@pytest.fixture()
def user(session):
    return UserFactory(email="johnan.sherp@example.com")


def _login(service: AuthService) -> TokenPairOut:
    return service.login(LoginIn(email="johnan.sherp@example.com", password=DEFAULT_PASSWORD))


# ------------------------------- Login ------------------------------------ #
def test_login_issues_distinct_token_pair(service, user):
    pair = _login(service)

    assert isinstance(pair, TokenPairOut)
    assert pair.access_token and pair.refresh_token
    assert pair.access_token != pair.refresh_token
    access = service.tokens.decode(pair.access_token)
    refresh = service.tokens.decode(pair.refresh_token)
    assert access["type"] == "access" and access["fresh"] is True
    assert refresh["type"] == "refresh"
    assert access["sub"] == refresh["sub"] == str(user.id)
    assert access["uid"] == user.id


def test_login_email_is_case_insensitive(service, user):
    pair = service.login(LoginIn(email="  JOHNAN.Sherp@Example.com", password=DEFAULT_PASSWORD))
    assert pair.refresh_token


def test_login_does_not_write_to_revocation_store(service, user):
    _login(service)
    assert len(service.revocations) == 0


def test_unknown_email_and_wrong_password_are_indistinguishable(service, user):
    with pytest.raises(InvalidCredentialsError) as unknown:
        service.login(LoginIn(email="missing@example.com", password=DEFAULT_PASSWORD))
    with pytest.raises(InvalidCredentialsError) as wrong:
        service.login(LoginIn(email=user.email, password="WrongPassword123!"))

    assert type(unknown.value) is type(wrong.value)
    assert str(unknown.value) == str(wrong.value) == "Invalid credentials"
    assert unknown.value.code == wrong.value.code == "invalid_credentials"


# ------------------------------ Refresh ----------------------------------- #
def test_refresh_rotates_and_revokes_old_token(service, user):
    pair1 = _login(service)

    pair2 = service.refresh(RefreshIn(refresh_token=pair1.refresh_token))

    assert pair2.refresh_token != pair1.refresh_token
    assert service.tokens.decode(pair2.access_token)["fresh"] is False
    assert service.revocations.is_revoked(pair1.refresh_token)
    assert not service.revocations.is_revoked(pair2.refresh_token)

    with pytest.raises(TokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair1.refresh_token))

    # the rotated token keeps working
    service.refresh(RefreshIn(refresh_token=pair2.refresh_token))


def test_refresh_with_unknown_token_is_invalid(service, user):
    with pytest.raises(InvalidTokenError):
        service.refresh(RefreshIn(refresh_token="refresh.1.999"))


def test_refresh_with_access_token_is_invalid(service, user):
    pair = _login(service)
    with pytest.raises(InvalidTokenError):
        service.refresh(RefreshIn(refresh_token=pair.access_token))


def test_refresh_with_expired_token_is_invalid(user, clock):
    service = AuthService(
        token_provider=StubTokenProvider(),
        revocation_store=InMemoryRevocationStore(clock=clock),
        token_cfg=AuthTokenConfig(refresh_expires=timedelta(seconds=-1)),
    )
    pair = _login(service)
    with pytest.raises(InvalidTokenError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_refresh_for_deleted_user_is_invalid(service, user, session):
    pair = _login(service)
    session.delete(user)
    session.flush()

    with pytest.raises(InvalidTokenError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_concurrent_refresh_loser_gets_token_revoked(service, user):
    """When another request revoked the token between check and revoke, no pair is issued."""
    pair = _login(service)
    real_is_revoked = service.revocations.is_revoked

    def racing_is_revoked(token: str) -> bool:
        result = real_is_revoked(token)
        service.revocations.revoke(token)  # the competing request wins here
        return result

    service.revocations.is_revoked = racing_is_revoked  # type: ignore[method-assign]

    with pytest.raises(TokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


# ------------------------------- Logout ----------------------------------- #
def test_logout_then_refresh_fails_with_token_revoked(service, user):
    pair = _login(service)

    service.logout(LogoutIn(refresh_token=pair.refresh_token))

    with pytest.raises(TokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_logout_is_idempotent(service, user):
    pair = _login(service)

    service.logout(LogoutIn(refresh_token=pair.refresh_token))
    service.logout(LogoutIn(refresh_token=pair.refresh_token))

    assert service.revocations.is_revoked(pair.refresh_token)
    assert len(service.revocations) == 1


def test_concurrent_logouts_both_succeed(service, user):
    pair = _login(service)
    errors: list[BaseException] = []

    def worker():
        try:
            service.logout(LogoutIn(refresh_token=pair.refresh_token))
        except BaseException as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert service.revocations.is_revoked(pair.refresh_token)


def test_logout_rejects_unknown_token(service):
    with pytest.raises(InvalidTokenError):
        service.logout(LogoutIn(refresh_token="garbage"))


def test_logout_rejects_access_token(service, user):
    pair = _login(service)
    with pytest.raises(InvalidTokenError):
        service.logout(LogoutIn(refresh_token=pair.access_token))


def test_logout_of_expired_token_skips_write(user, clock):
    service = AuthService(
        token_provider=StubTokenProvider(),
        revocation_store=InMemoryRevocationStore(clock=clock),
        token_cfg=AuthTokenConfig(refresh_expires=timedelta(seconds=-1)),
    )
    pair = _login(service)

    service.logout(LogoutIn(refresh_token=pair.refresh_token))

    assert len(service.revocations) == 0


def test_revocation_expires_after_retention(service, user, clock):
    pair = _login(service)
    service.logout(LogoutIn(refresh_token=pair.refresh_token))

    clock.now += timedelta(days=7)

    assert service.revocations.is_revoked(pair.refresh_token) is False


# ----------------------------- Registration -------------------------------- #
def test_register_creates_user_and_signs_in(service, session):
    out = service.register(
        RegisterIn(email="New@Example.com", username="newbie", password=DEFAULT_PASSWORD)
    )

    assert out.user.email == "new@example.com"
    assert service.tokens.decode(out.tokens.refresh_token)["sub"] == str(out.user.id)
    pair = service.login(LoginIn(email="new@example.com", password=DEFAULT_PASSWORD))
    assert pair.access_token


def test_register_duplicate_email_conflicts(service, user):
    with pytest.raises(ConflictError):
        service.register(
            RegisterIn(email=user.email.upper(), username="other", password=DEFAULT_PASSWORD)
        )


def test_register_duplicate_username_conflicts(service, user):
    with pytest.raises(ConflictError):
        service.register(
            RegisterIn(email="other@example.com", username=user.username, password=DEFAULT_PASSWORD)
        )


def test_whoami(service, user):
    out = service.whoami(str(user.id))
    assert (out.id, out.email) == (user.id, user.email)

    with pytest.raises(InvalidTokenError):
        service.whoami("999999")
    with pytest.raises(InvalidTokenError):
        service.whoami("not-a-number")


# ---------------------------- Correlation --------------------------------- #
def test_auth_events_carry_context_request_id(user, clock, caplog):
    service = AuthService(
        token_provider=StubTokenProvider(),
        revocation_store=InMemoryRevocationStore(clock=clock),
        ctx=ServiceContext(request_id="req-42"),
    )
    caplog.set_level(logging.INFO, logger="sherp_auth.auth")

    _login(service)

    (record,) = [r for r in caplog.records if r.name == "sherp_auth.auth"]
    assert record.event == "auth.login"
    assert record.request_id == "req-42"
