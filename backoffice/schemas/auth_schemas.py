# backoffice/schemas/auth_schemas.py
from pydantic import BaseModel
from typing import Literal, Optional

class UserLogin(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    role: Optional[str] = None

class UserOut(BaseModel):
    id: int
    username: str
    role: str
    is_active: bool

    class Config:
        from_attributes = True

class PinCheck(BaseModel):
    pin: str

class PinCheckResponse(BaseModel):
    valid: bool
