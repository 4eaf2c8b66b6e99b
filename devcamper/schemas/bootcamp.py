from pydantic import Field, field_validator
from typing import List, Literal, Optional

from devcamper.schemas.auth import CamelModel

Career = Literal["Web Development", "Mobile Development", "UI/UX", "Data Science", "Business", "Other"]

_URL_PREFIXES = ("http://", "https://")

def _check_website(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    text = value.strip()
    if not text.lower().startswith(_URL_PREFIXES) or "." not in text:
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return text

class BootcampCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, max_length=300)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=200, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address: str = Field(min_length=1, max_length=400)
    careers: List[Career] = Field(min_length=1)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    @field_validator("website")
    @classmethod
    def validate_website(cls, value):
        return _check_website(value)

class BootcampUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, max_length=300)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=200, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address: Optional[str] = Field(default=None, min_length=1, max_length=400)
    careers: Optional[List[Career]] = Field(default=None, min_length=1)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    @field_validator("website")
    @classmethod
    def validate_website(cls, value):
        return _check_website(value)
