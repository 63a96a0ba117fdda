from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, EmailStr, Field

from freshmarket.schemas.base import BaseSchema, NonEmptyStr, TimestampSchema

# bcrypt only reads the first 72 bytes of a secret
MAX_PASSWORD_BYTES = 72


def _check_password_size(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=1), AfterValidator(_check_password_size)]


class UserBase(BaseSchema):
    name: NonEmptyStr = Field(max_length=100)
    email: EmailStr


class AdminCreate(UserBase):
    password: Password


class AdminUpdate(UserBase):
    password: Optional[Password] = None


class RetailerCreate(UserBase):
    password: Password
    farm_name: NonEmptyStr
    location: NonEmptyStr
    profile_image: Optional[str] = None


class RetailerUpdate(UserBase):
    password: Optional[Password] = None
    farm_name: NonEmptyStr
    location: NonEmptyStr
    profile_image: Optional[str] = None


class LoginRequest(BaseSchema):
    email: EmailStr
    password: Password


class User(TimestampSchema, UserBase):
    id: str
    role: Literal["admin", "retailer"]
    profile_image: Optional[str] = None
    farm_name: Optional[str] = None
    location: Optional[str] = None


class UserWithToken(BaseSchema):
    access_token: str
    token_type: str = "bearer"
    user: User


class TokenData(BaseSchema):
    sub: str
    role: Literal["admin", "retailer"]
