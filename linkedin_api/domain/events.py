from dataclasses import dataclass, fields
from typing import Optional


class Event:
    """Marker base class for domain events."""

    @classmethod
    def from_dict(cls, data: dict):
        """
        Tolerant reader for inbound events: ignore unknown fields.
        """
        allowed = {f.name for f in fields(cls) if f.init}
        filtered = {k: v for k, v in data.items() if k in allowed}
        return cls(**filtered)


@dataclass
class PostCreated(Event):
    post_id: str
    user_id: Optional[str]


@dataclass
class PostImageAttached(Event):
    post_id: str
    image_url: str


@dataclass
class CommentAdded(Event):
    post_id: str
    comment_id: str
    user_id: Optional[str]


@dataclass
class LikeToggled(Event):
    post_id: str
    user_id: str
    liked: bool
    number_of_likes: int


@dataclass
class UserRegistered(Event):
    user_id: str
    email: str
