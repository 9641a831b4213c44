from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mass_translate.config.redis import get_redis
from mass_translate.config.settings import settings
from mass_translate.models.database import get_db
from mass_translate.models.user import User
from mass_translate.services.auth_service import decode_token
from mass_translate.services.translation import TranslationCache, TranslationPipeline, get_deepl_client
from mass_translate.services.user_service import user_service

logger = logging.getLogger(__name__)


async def _authenticate(authorization: Optional[str], db: AsyncSession) -> User:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Authorization header")
    payload = decode_token(token.strip())
    if not payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    user = await user_service.get_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await _authenticate(authorization, db)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"user {current_user.id} attempted an admin action")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return current_user


async def require_translate_access(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Gate for the translate endpoint; open unless TRANSLATE_REQUIRE_AUTH is set."""
    if not settings.TRANSLATE_REQUIRE_AUTH:
        return None
    return await _authenticate(authorization, db)


async def get_translation_pipeline() -> TranslationPipeline:
    cache = TranslationCache(await get_redis())
    return TranslationPipeline(cache, get_deepl_client)
