from pydantic import BaseModel, Field
from typing import Optional

class RegisterRequest(BaseModel):
    register_number: str = Field(min_length=1, max_length=32)
    password: str = Field(max_length=128)
    confirm_password: str = Field(max_length=128)

class LoginRequest(BaseModel):
    register_number: str = Field(min_length=1, max_length=32)
    password: str

class AdminLoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str

class SetupAdminRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(max_length=128)

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None  # seconds (from Supabase)

class SessionInfo(BaseModel):
    id: str
    email: str
    role: str
    name: str = ""
    register_number: str = ""
