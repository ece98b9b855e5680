from __future__ import annotations

import pytest

from core.auth import Role, Session, SessionAuthenticator
from core.settings import Settings, StorageSettings
from tests.utils_http import TEST_SECRET, RecordingStorage


@pytest.fixture
def recording_storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(storage=StorageSettings(local_root=tmp_path / "objects"))


@pytest.fixture
def authenticator() -> SessionAuthenticator:
    return SessionAuthenticator(TEST_SECRET)


@pytest.fixture
def student_session() -> Session:
    return Session(user_id="user-123", role=Role.STUDENT)


@pytest.fixture
def auth_headers(authenticator, student_session) -> dict[str, str]:
    return {"Authorization": f"Bearer {authenticator.issue_token(student_session)}"}
