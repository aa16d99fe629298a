# app/schemas/auth.py
from pydantic import BaseModel, EmailStr
from typing import List


class LoginRequest(BaseModel):
    correo: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    id: int
    nombre: str
    correo: EmailStr
    roles: List[str]
