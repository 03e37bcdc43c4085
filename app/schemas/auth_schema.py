from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional

from enums.user_role import UserRole


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: Optional[str] = None
    company_name: Optional[str] = None


class StaffCreate(UserCreate):
    role: UserRole = UserRole.SUPPORT


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    company_name: Optional[str] = None
    role: UserRole
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class UserMinimumResponse(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
