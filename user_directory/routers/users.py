from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException

from user_directory.deps import get_user_store
from user_directory.errors import Err, ErrorKind
from user_directory.models import ErrorDetail, UserOut, UserPayload
from user_directory.user_store import UserStore

router = APIRouter(prefix="/users", tags=["users"])


def _status_for(err: Err) -> int:
    if err.kind is ErrorKind.invalid_input:
        return 400
    if err.kind is ErrorKind.duplicate:
        return 409
    return 404 if err.not_found else 502


def _http_error(err: Err) -> HTTPException:
    detail = ErrorDetail(kind=err.kind.value, message=err.message, field=err.field)
    return HTTPException(status_code=_status_for(err), detail=detail.model_dump())


@router.post("", response_model=UserOut, status_code=201, response_model_by_alias=True)
async def create_user(payload: UserPayload = Body(...), store: UserStore = Depends(get_user_store)) -> UserOut:
    result = await store.create(payload.username, payload.first_name, payload.email, payload.is_active)
    if isinstance(result, Err):
        raise _http_error(result)
    return UserOut.from_user(result.value)


@router.get("", response_model=list[UserOut], response_model_by_alias=True)
async def list_users(store: UserStore = Depends(get_user_store)) -> list[UserOut]:
    result = await store.read_all()
    if isinstance(result, Err):
        raise _http_error(result)
    return [UserOut.from_user(u) for u in result.value]


@router.get("/{username}", response_model=UserOut, response_model_by_alias=True)
async def read_user(username: str, store: UserStore = Depends(get_user_store)) -> UserOut:
    result = await store.read(username)
    if isinstance(result, Err):
        raise _http_error(result)
    return UserOut.from_user(result.value)


@router.put("/{username}", response_model=UserOut, response_model_by_alias=True)
async def update_user(
    username: str,
    payload: UserPayload = Body(...),
    store: UserStore = Depends(get_user_store),
) -> UserOut:
    """Replace all four fields of an existing user.

    Renaming a user onto its own current username is allowed.
    """
    result = await store.update(username, payload.username, payload.first_name, payload.email, payload.is_active)
    if isinstance(result, Err):
        raise _http_error(result)
    return UserOut.from_user(result.value)
