from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Literal

Role = Literal["owner", "admin", "user", "blocked"]

class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    full_name: str | None = Field(None, max_length=100, description="Display name")

class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: str | None
    role: Role
    created_at: datetime

    class Config:
        from_attributes = True

class RoleUpdate(BaseModel):
    role: Literal["admin", "user", "blocked"]

class PasswordReset(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8, max_length=72)

class ForgotPassword(BaseModel):
    email: EmailStr

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role
