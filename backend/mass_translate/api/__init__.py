from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from mass_translate.api import auth
from mass_translate.api import users
from mass_translate.api import translate

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
async def health():
    # Liveness only: never touches Redis or DeepL
    return "OK"


# Include auth, users, translate routers
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(translate.router)
