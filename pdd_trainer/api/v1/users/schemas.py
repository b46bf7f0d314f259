# -*- coding: utf-8 -*-
"""Pydantic schemas for user endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from pdd_trainer.domain.enums import Role


class RegisterSchema(BaseModel):
    email: str
    password: str

    class Config:
        json_schema_extra = {
            "example": {"email": "a@x.com", "password": "secret1"}
        }


class LoginSchema(BaseModel):
    email: str
    password: str


class ChangePasswordSchema(BaseModel):
    current_password: str
    new_password: str


class UserReadSchema(BaseModel):
    id: int
    email: str
    role: Role
    is_verified: bool
    avatar_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LoginDataSchema(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserReadSchema


class AvatarSchema(BaseModel):
    avatar_url: str


class AdminStatsSchema(BaseModel):
    users: int
    verified_users: int
    admins: int
    topics: int
    questions: int
    attempts: int
    passed_attempts: int
    failed_attempts: int
    exam_attempts: int
