from typing import List, Optional

from pydantic import BaseModel, field_validator

from linkedin_api.domain import model


class ExperienceI(BaseModel):
    role: Optional[str] = None
    company: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None  # could be null
    description: Optional[str] = None
    area: Optional[str] = None
    image: str = model.DEFAULT_EXPERIENCE_IMAGE


class UserRegister(BaseModel):
    name: str
    surname: str
    email: str
    bio: Optional[str] = None
    title: Optional[str] = None
    area: Optional[str] = None
    image: Optional[str] = None
    experiences: List[ExperienceI] = []

    @field_validator("name", "surname")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("is required")
        return value

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return model.normalize_email(value)
