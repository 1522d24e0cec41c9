"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from resource_booking.models.user import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole = Field(default=UserRole.PARTICIPANT)

    @field_validator("role")
    @classmethod
    def no_self_service_admin(cls, value: UserRole) -> UserRole:
        # Admins are provisioned out of band.
        if value == UserRole.ADMIN:
            raise ValueError("admin accounts cannot be self-registered")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
