from __future__ import annotations

from fastapi import Request

from user_directory.document_store import InMemoryDocumentDatabase
from user_directory.settings import Settings, get_settings
from user_directory.user_store import UserStore


def get_settings_dep() -> Settings:
    """FastAPI dependency for settings.

    Delegates to user_directory.settings.get_settings (canonical constructor).
    """
    return get_settings()


def build_user_store(settings: Settings) -> UserStore:
    # USER_STORE_BACKEND=memory runs without MongoDB (data is lost on restart).
    if settings.user_store_backend == "memory":
        database = InMemoryDocumentDatabase(settings.user_db_name)
    elif settings.user_store_backend == "mongo":
        # Imported lazily so memory mode never touches the driver.
        from user_directory.mongo_store import MongoDocumentDatabase

        database = MongoDocumentDatabase(url=settings.user_db_url, db_name=settings.user_db_name)
    else:
        raise ValueError(f"Unknown USER_STORE_BACKEND: {settings.user_store_backend!r}")

    return UserStore(
        database,
        db_name=settings.user_db_name,
        url=settings.user_db_url,
        reset=settings.user_db_reset,
    )


def get_user_store(request: Request) -> UserStore:
    # Built and initialized once by the app lifespan; tests may override this dependency.
    return request.app.state.user_store
