from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from buzzly.db.models import UserRole


class UserCreateModel(BaseModel):
    username: str = Field(min_length=3, max_length=30, pattern=r"^\w+$")
    email: EmailStr
    password: str = Field(min_length=6)

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "johndoe",
                "email": "johndoe123@co.com",
                "password": "testpass123",
            }
        }
    }


class UserLoginModel(BaseModel):
    email: EmailStr
    password: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "johndoe123@co.com",
                "password": "testpass123",
            }
        }
    }


class ChangePasswordModel(BaseModel):
    current_password: str
    new_password: str


class UserPublic(BaseModel):
    id: str
    username: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class UserRead(UserPublic):
    email: EmailStr
    is_blocked: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class AuthResponseModel(BaseModel):
    status: bool
    message: str
    access_token: str
    token_type: str = "bearer"
    data: UserRead


class MessageResponseModel(BaseModel):
    status: bool
    message: str


class TokenUser(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    role: str = UserRole.GENERAL.value
    access_token: Optional[str] = None
    token_type: Optional[str] = "bearer"

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_moderator(self) -> bool:
        return self.role == UserRole.ADMIN.value
