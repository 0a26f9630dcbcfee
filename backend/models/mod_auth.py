from enum import Enum
from pydantic import BaseModel, EmailStr
from typing import Optional

class UserRole(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

class AuthUser(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: UserRole = UserRole.STUDENT

class TokenData(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: UserRole = UserRole.STUDENT
    exp: Optional[float] = None
