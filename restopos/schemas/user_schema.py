from enum import Enum
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
import re


class UserRole(str, Enum):
    ADMIN = "admin"
    CASHIER = "cashier"
    WAITER = "waiter"


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    full_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, data: str):
        # Check if password meets requirements
        if not re.search(r"[A-Z]", data):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", data):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", data):
            raise ValueError("Password must contain at least one digit")
        if not re.search(r'[!@#$%^&*(),.?":{}|<>]', data):
            raise ValueError("Password must contain at least one special character")
        return data


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UpdateUserRole(BaseModel):
    role: UserRole


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: UserRole


class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
