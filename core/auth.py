"""Session resolution for authenticated requests.

Sessions are minted by the sign-in frontend as signed JWTs carrying the
user id (``uid``) and role. This module only verifies them; issuing tokens
here exists for local tooling and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping

from jose import JWTError, jwt
from loguru import logger

from core.settings import AuthSettings


class Role(str, Enum):
    STUDENT = "student"
    GURU = "guru"
    ADMIN = "admin"
    UNKNOWN = "unknown"

    @classmethod
    def from_claim(cls, value: Any) -> "Role":
        if not isinstance(value, str):
            return cls.UNKNOWN
        normalized = value.strip().lower()
        if normalized in {"siswa", "student"}:
            return cls.STUDENT
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Session:
    user_id: str
    role: Role = Role.UNKNOWN

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.user_id.strip())


def session_from_claims(claims: Mapping[str, Any]) -> Session | None:
    uid = claims.get("uid")
    if not isinstance(uid, str) or not uid.strip():
        return None
    return Session(user_id=uid.strip(), role=Role.from_claim(claims.get("role")))


class SessionAuthenticator:
    """Verify session tokens from the Authorization header or session cookie."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        cookie_name: str = "majelis_session",
        token_ttl: timedelta = timedelta(days=30),
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.cookie_name = cookie_name
        self.token_ttl = token_ttl

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "SessionAuthenticator":
        return cls(
            settings.secret,
            algorithm=settings.algorithm,
            cookie_name=settings.cookie_name,
            token_ttl=timedelta(minutes=settings.token_ttl_minutes),
        )

    def issue_token(self, session: Session, expires_delta: timedelta | None = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta or self.token_ttl)
        claims = {"uid": session.user_id, "role": session.role.value, "exp": expire}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Session | None:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.debug("[auth] rejected session token: {error}", error=str(exc))
            return None
        return session_from_claims(claims)

    def extract_token(self, headers: Mapping[str, str], cookies: Mapping[str, str]) -> str | None:
        authorization = headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        cookie = cookies.get(self.cookie_name, "").strip()
        return cookie or None

    def current_session(self, headers: Mapping[str, str], cookies: Mapping[str, str]) -> Session | None:
        token = self.extract_token(headers, cookies)
        if not token:
            return None
        return self.decode(token)


__all__ = ["Role", "Session", "SessionAuthenticator", "session_from_claims"]
