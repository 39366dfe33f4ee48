"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)


# Fields are optional so that a missing value is reported with its own message.
class DisplayNameRequest(BaseModel):
    displayName: str | None = Field(default=None, max_length=100)


class PasswordChangeRequest(BaseModel):
    currentPassword: str | None = Field(default=None, max_length=128)
    newPassword: str | None = Field(default=None, max_length=128)


class AdminResponse(BaseModel):
    id: int
    email: str
    role: str


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    displayName: str | None = None
    photoURL: str | None = None
