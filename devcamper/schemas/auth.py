from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Literal, Optional

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class RegisterIn(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["user", "publisher"] = "user"

class LoginIn(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UpdateDetailsIn(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None

class UpdatePasswordIn(CamelModel):
    current_password: str
    new_password: str = Field(min_length=6)

class ForgotPasswordIn(CamelModel):
    email: str

class ResetPasswordIn(CamelModel):
    password: str = Field(min_length=6)

class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["user", "publisher", "admin"] = "user"

class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Literal["user", "publisher", "admin"]] = None
