from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=1)
    roles: Optional[List[int]] = None


class SigninRequest(BaseModel):
    username_or_email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ForgotPasswordRequest(BaseModel):
    username_or_email: str


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(..., min_length=1)


class UpdateRolesRequest(BaseModel):
    user_id: int
    roles: List[int] = []


class UpdateRolesResponse(BaseModel):
    message: str
    roles: List[int]
