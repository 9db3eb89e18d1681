# backend/schemas/user.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional

from utils.permissions import UserRole

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for sign-up requests; the account starts unauthorized
class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=64)
    display_name: Optional[str] = None

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: UserRole
    display_name: Optional[str] = None
    is_authorized: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Schema for administrative profile updates (name and role)
class UserUpdate(BaseModel):
    display_name: Optional[str] = None
    role: Optional[UserRole] = None

class AuthorizationUpdate(BaseModel):
    is_authorized: bool

class UsersPage(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
