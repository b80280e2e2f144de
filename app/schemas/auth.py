from pydantic import Field, field_validator

from app.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v


class LoginRequest(CamelModel):
    username: str
    password: str


class UserResponse(CamelModel):
    id: int
    username: str
    is_admin: bool = False
