# vermietertools/models/auth_models.py

from typing import Optional
from pydantic import BaseModel


# Felder sind optional, damit fehlende Angaben als 400 mit eigener
# Meldung beantwortet werden statt mit FastAPIs 422.
class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class PublicUser(BaseModel):
    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    message: str
    user: PublicUser


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    code: str
