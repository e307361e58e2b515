from __future__ import annotations

import pytest

from user_directory.deps import build_user_store
from user_directory.document_store import InMemoryDocumentDatabase
from user_directory.settings import Settings, get_settings


def test_defaults(monkeypatch):
    for name in ("USER_DB_NAME", "USER_DB_URL", "USER_DB_RESET", "USER_STORE_BACKEND"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.user_db_name == "user_directory"
    assert s.user_db_url == "mongodb://localhost:27017"
    assert s.user_db_reset is False
    assert s.user_store_backend == "mongo"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("USER_DB_NAME", "people")
    monkeypatch.setenv("USER_DB_RESET", "true")
    monkeypatch.setenv("USER_STORE_BACKEND", " Memory ")
    s = get_settings()
    assert s.user_db_name == "people"
    assert s.user_db_reset is True
    assert s.user_store_backend == "memory"


def test_build_memory_store():
    store = build_user_store(Settings(user_store_backend="memory", user_db_name="people", user_db_reset=True))
    assert isinstance(store.database, InMemoryDocumentDatabase)
    assert store.db_name == "people"
    assert store.reset is True


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        build_user_store(Settings(user_store_backend="sqlite"))
