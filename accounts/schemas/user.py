"""Pydantic schemas for user endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class UserUpdateRequest(BaseModel):
    username: str | None = None


class PasswordResetRequest(BaseModel):
    email: str | None = None


class PasswordUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str | None = None
    password_reset_token: str | None = Field(default=None, alias="passwordResetToken")


class UserResponse(BaseModel):
    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserPageResponse(BaseModel):
    content: list[UserResponse]
    page: int
    size: int
    totalPages: int


class MessageResponse(BaseModel):
    message: str
