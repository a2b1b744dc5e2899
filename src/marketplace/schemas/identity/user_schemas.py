# src/marketplace/schemas/identity/user_schemas.py

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional

# ==============================================================================
# 1. Input Schemas
# ==============================================================================

class UserCreate(BaseModel):
    """Registration payload."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="Plain-text password, hashed before storage")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)


class UserProfileUpdate(BaseModel):
    """
    Partial profile update. Only fields that are present and non-empty are applied.
    The profile image travels separately as a file upload.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=1000)
    store_name: Optional[str] = Field(None, max_length=100)

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v not in (None, "")}


# ==============================================================================
# 2. Output Schemas
#    - none of them carries password_hash
# ==============================================================================

class UserRead(BaseModel):
    uuid: str = Field(..., description="Public user identifier")
    name: str
    email: str
    bio: Optional[str] = None
    store_name: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OwnerSummary(BaseModel):
    """Owner view embedded in product lists."""
    uuid: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class OwnerProfile(OwnerSummary):
    """Owner view embedded in the product detail page."""
    bio: Optional[str] = None
    store_name: Optional[str] = None
    profile_image: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthSession(Token):
    """Token plus the authenticated user, returned by register and login."""
    user: UserRead
