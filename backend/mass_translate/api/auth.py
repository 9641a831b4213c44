import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from mass_translate.api.deps import get_current_user
from mass_translate.models.database import get_db
from mass_translate.models.user import User
from mass_translate.schemas.user import RegisterRequest, LoginRequest, LoginResponse, UserResponse
from mass_translate.services.auth_service import verify_password, create_access_token
from mass_translate.services.user_service import user_service, EmailAlreadyExistsError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    # Self-registered accounts are never admins; promote them via the users API
    try:
        user = await user_service.create(db, request.email, request.password)
    except EmailAlreadyExistsError:
        raise HTTPException(status_code=409, detail="Email already in use")

    logger.info(f"User {user.id} registered")
    return UserResponse(**user.to_dict())


@router.post("/auth/login", response_model=LoginResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_by_email(db, request.email)
    if not user or not verify_password(request.password, user.hashed_password):
        logger.info(f"Failed login for {request.email}")
        raise HTTPException(status_code=401, detail="Incorrect email or password")

    token = create_access_token(str(user.id))
    return LoginResponse(id=user.id, email=user.email, token=token)


@router.get("/auth/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return UserResponse(**current_user.to_dict())
