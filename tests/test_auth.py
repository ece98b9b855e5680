from __future__ import annotations

from datetime import timedelta

import pytest

from core.auth import Role, Session, SessionAuthenticator, session_from_claims
from core.settings import AuthSettings


@pytest.mark.parametrize(
    ("claim", "expected"),
    [
        ("siswa", Role.STUDENT),
        ("student", Role.STUDENT),
        ("guru", Role.GURU),
        ("ADMIN", Role.ADMIN),
        ("kepala-sekolah", Role.UNKNOWN),
        (None, Role.UNKNOWN),
    ],
)
def test_role_from_claim(claim, expected):
    assert Role.from_claim(claim) is expected


def test_session_from_claims_requires_uid():
    assert session_from_claims({"role": "guru"}) is None
    assert session_from_claims({"uid": "  "}) is None
    assert session_from_claims({"uid": "u-1", "role": "guru"}) == Session(user_id="u-1", role=Role.GURU)


def test_token_round_trip(authenticator):
    token = authenticator.issue_token(Session(user_id="u-1", role=Role.ADMIN))
    assert authenticator.decode(token) == Session(user_id="u-1", role=Role.ADMIN)


def test_expired_token_is_rejected(authenticator):
    token = authenticator.issue_token(Session(user_id="u-1"), expires_delta=timedelta(seconds=-10))
    assert authenticator.decode(token) is None


def test_token_signed_with_other_secret_is_rejected(authenticator):
    forged = SessionAuthenticator("another-secret").issue_token(Session(user_id="u-1"))
    assert authenticator.decode(forged) is None
    assert authenticator.decode("not-a-jwt") is None


def test_current_session_prefers_bearer_header(authenticator):
    header_token = authenticator.issue_token(Session(user_id="from-header"))
    cookie_token = authenticator.issue_token(Session(user_id="from-cookie"))

    session = authenticator.current_session(
        {"authorization": f"Bearer {header_token}"},
        {"majelis_session": cookie_token},
    )
    assert session.user_id == "from-header"


def test_current_session_falls_back_to_cookie(authenticator):
    token = authenticator.issue_token(Session(user_id="from-cookie", role=Role.GURU))
    session = authenticator.current_session({}, {"majelis_session": token})
    assert session == Session(user_id="from-cookie", role=Role.GURU)


def test_current_session_without_credentials(authenticator):
    assert authenticator.current_session({}, {}) is None
    assert authenticator.current_session({"authorization": "Basic abc"}, {}) is None


def test_from_settings(monkeypatch):
    monkeypatch.setenv("AUTH_SECRET", "env-secret")
    authenticator = SessionAuthenticator.from_settings(AuthSettings(cookie_name="sid", token_ttl_minutes=5))
    assert authenticator.secret == "env-secret"
    assert authenticator.cookie_name == "sid"
    assert authenticator.token_ttl == timedelta(minutes=5)
