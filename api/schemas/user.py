# api/schemas/user.py
from typing import Optional
from pydantic import BaseModel, ConfigDict

class SignupRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None

class LoginRequest(BaseModel):
    email: str
    password: str

class User(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    points: int
    is_admin: bool = False

    model_config = ConfigDict(from_attributes=True)

class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class Balance(BaseModel):
    points: int
    escrow_points: int = 0
