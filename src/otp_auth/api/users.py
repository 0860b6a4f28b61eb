"""Users router: bearer-protected identity directory lookups."""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from otp_auth.api.auth import UserResponse
from otp_auth.api.dependencies import CurrentClaims, get_user_repository
from otp_auth.database.repository import DEFAULT_PAGE_SIZE, UserRepository
from otp_auth.errors import UserNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["users"])


class UsersListResponse(BaseModel):
    users: list[UserResponse]
    total_count: int
    page: int
    page_size: int


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    claims: CurrentClaims,
    users: Annotated[UserRepository, Depends(get_user_repository)],
):
    """Look up a user by ID."""
    user = await users.find_by_id(user_id)
    if user is None:
        raise UserNotFoundError()
    return UserResponse.from_user(user)


@router.get("", response_model=UsersListResponse)
async def list_users(
    claims: CurrentClaims,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    page: Annotated[int, Query()] = 1,
    page_size: Annotated[int, Query()] = DEFAULT_PAGE_SIZE,
    search: Annotated[str, Query()] = "",
):
    """List users, newest first, with optional phone-number substring search."""
    if page <= 0:
        page = 1
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    logger.debug("User %s listing users (page=%s, search=%r)", claims.user_id, page, search)
    items, total = await users.list_users(page=page, page_size=page_size, search=search)
    return UsersListResponse(
        users=[UserResponse.from_user(u) for u in items],
        total_count=total,
        page=page,
        page_size=page_size,
    )
