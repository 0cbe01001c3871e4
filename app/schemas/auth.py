"""
Schemas para login

email/password son opcionales a nivel schema: AuthService responde 400
con "Email y contraseña son requeridos" si faltan.
"""

from pydantic import BaseModel, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    commission_percentage: Optional[float] = Field(None, alias="commissionPercentage")

    class Config:
        from_attributes = True
        populate_by_name = True


class LoginResponse(BaseModel):
    user: UserOut
    token: str
