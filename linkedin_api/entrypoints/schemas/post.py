import re
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, JsonValue, field_validator

OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")


def _check_reference(value: Optional[str]) -> Optional[str]:
    if value is not None and not OBJECT_ID.match(value):
        raise ValueError("must be a valid id")
    return value


# Posts and comments accept arbitrary extra fields as long as they are JSON values
class PostI(BaseModel):
    model_config = ConfigDict(extra="allow")
    __pydantic_extra__: Dict[str, JsonValue]

    user: Optional[str] = None
    image: Optional[str] = None

    @field_validator("user")
    @classmethod
    def user_is_reference(cls, value):
        return _check_reference(value)


class CommentI(BaseModel):
    model_config = ConfigDict(extra="allow")
    __pydantic_extra__: Dict[str, JsonValue]

    user: Optional[str] = None

    @field_validator("user")
    @classmethod
    def user_is_reference(cls, value):
        return _check_reference(value)


# Likes
class PostLikeI(BaseModel):
    userId: str
