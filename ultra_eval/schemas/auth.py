# ultra_eval/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: str = Field(min_length=1, max_length=100)
    school: str | None = Field(default=None, max_length=255)
    grade: str | None = Field(default=None, max_length=50)
