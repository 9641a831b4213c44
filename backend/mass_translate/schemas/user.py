from typing import Optional
from pydantic import BaseModel, Field

from mass_translate.config.constants import PASSWORD_MIN_LENGTH


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    id: str
    email: str
    token: str


class UserResponse(BaseModel):
    id: str
    email: str
    is_admin: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class UpdateUserRequest(BaseModel):
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    is_admin: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=PASSWORD_MIN_LENGTH)
