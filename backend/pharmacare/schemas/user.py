from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, field_validator

Role = Literal["admin", "pharmacist", "cashier", "user"]


class UserRegister(BaseModel):
    email: EmailStr
    password: str
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserCreate(BaseModel):
    """Admin-side user creation."""
    email: EmailStr
    password: str
    name: str
    role: Role = "pharmacist"
    status: Literal["active", "inactive"] = "active"
    permissions: Optional[List[str]] = None
    avatar: Optional[str] = None


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[Literal["active", "inactive"]] = None
    permissions: Optional[List[str]] = None
    avatar: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    status: str
    permissions: List[str] = []
    avatar: Optional[str] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
