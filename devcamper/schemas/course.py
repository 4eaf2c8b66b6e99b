from pydantic import Field, field_validator
from typing import Literal, Optional, Union

from devcamper.schemas.auth import CamelModel

Skill = Literal["beginner", "intermediate", "advanced"]

WEEKS_MAX_LENGTH = 20

def _weeks_text(value):
    if value is None:
        return value
    text = str(value).strip()
    if len(text) > WEEKS_MAX_LENGTH:
        raise ValueError(f"weeks must be at most {WEEKS_MAX_LENGTH} characters")
    return text

class CourseCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    weeks: Union[str, int]
    tuition: float = Field(ge=0)
    minimum_skill: Skill
    scholarship_available: bool = False

    @field_validator("weeks")
    @classmethod
    def normalize_weeks(cls, value):
        return _weeks_text(value)

class CourseUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    weeks: Optional[Union[str, int]] = None
    tuition: Optional[float] = Field(default=None, ge=0)
    minimum_skill: Optional[Skill] = None
    scholarship_available: Optional[bool] = None

    @field_validator("weeks")
    @classmethod
    def normalize_weeks(cls, value):
        return _weeks_text(value)
