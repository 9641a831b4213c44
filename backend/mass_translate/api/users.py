"""
Users API - Admin-only account management

Endpoints for:
- Listing users (paginated)
- Fetching, updating and deleting a single user
"""
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from mass_translate.api.deps import require_admin
from mass_translate.config.constants import DEFAULT_USER_LIST_LIMIT, MAX_USER_LIST_LIMIT
from mass_translate.models.database import get_db
from mass_translate.models.user import User
from mass_translate.schemas.user import UserResponse, UpdateUserRequest
from mass_translate.services.user_service import user_service, EmailAlreadyExistsError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def _parse_int(value: Optional[str], default: int, minimum: int, maximum: Optional[int] = None) -> int:
    # Out-of-range or malformed values fall back to the default
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if parsed < minimum or (maximum is not None and parsed > maximum):
        return default
    return parsed


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid ID")

    user = await user_service.get_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user not found")
    return user


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    limit_value = _parse_int(limit, DEFAULT_USER_LIST_LIMIT, 1, MAX_USER_LIST_LIMIT)
    offset_value = _parse_int(offset, 0, 0)
    users = await user_service.list_users(db, limit=limit_value, offset=offset_value)
    return [UserResponse(**u.to_dict()) for u in users]


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await _get_user_or_404(db, user_id)
    return UserResponse(**user.to_dict())


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, request: UpdateUserRequest, db: AsyncSession = Depends(get_db)):
    user = await _get_user_or_404(db, user_id)
    try:
        user = await user_service.update(
            db,
            user,
            email=request.email,
            is_admin=request.is_admin,
            password=request.password,
        )
    except EmailAlreadyExistsError:
        raise HTTPException(status_code=409, detail="Email already in use")

    logger.info(f"User {user.id} updated")
    return UserResponse(**user.to_dict())


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await _get_user_or_404(db, user_id)
    await user_service.delete(db, user)
    logger.info(f"User {user_id} deleted")
    return Response(status_code=204)
