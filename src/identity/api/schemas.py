"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "mobile": "+91 98765 43210",
                    "email": "jane.doe@example.com",
                    "password": "s3cret-pass",
                    "address": "12 MG Road, Bengaluru",
                }
            ]
        }
    }

    name: str = Field(..., max_length=100)
    mobile: str = Field(..., max_length=20)
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)
    address: str | None = None


class LoginRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"mobile": "+91 98765 43210", "password": "s3cret-pass"},
                {"email": "admin@example.com", "password": "s3cret-pass"},
            ]
        }
    }

    mobile: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=254)
    password: str = Field(..., max_length=128)


class UpdateProfileRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"name": "Jane Smith", "address": "4 Park Street, Kolkata"}]}}

    name: str | None = Field(None, max_length=100)
    mobile: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=254)
    address: str | None = None


class CreateUserRequest(RegisterRequest):
    pass


class UpdateUserRequest(UpdateProfileRequest):
    password: str | None = Field(None, max_length=128)


# --- Response Schemas ---


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    mobile: str
    email: str
    address: str | None = None
    is_admin: bool = False
    created_at: datetime


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
