# -*- coding: utf-8 -*-
"""Pydantic schemas for email verification and password recovery."""

from pydantic import BaseModel


class EmailSchema(BaseModel):
    email: str


class TokenSchema(BaseModel):
    token: str


class ResetPasswordSchema(BaseModel):
    token: str
    new_password: str

    class Config:
        json_schema_extra = {
            "example": {"token": "3f1c...e9", "new_password": "newsecret"}
        }


class VerifyEmailDataSchema(BaseModel):
    email: str
    already_verified: bool
