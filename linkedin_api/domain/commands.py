from dataclasses import dataclass, field, fields
from typing import List, Optional


class Command:
    """Marker base class for commands."""

    @classmethod
    def from_dict(cls, data: dict):
        """
        Tolerant reader: ignore extra fields when constructing commands.
        """
        allowed = {f.name for f in fields(cls) if f.init}
        filtered = {k: v for k, v in data.items() if k in allowed}
        return cls(**filtered)


@dataclass
class CreatePost(Command):
    fields: dict


@dataclass
class UpdatePost(Command):
    post_id: str
    fields: dict


@dataclass
class DeletePost(Command):
    post_id: str


@dataclass
class AttachPostImage(Command):
    post_id: str
    file_name: str
    local_path: str


@dataclass
class AddComment(Command):
    post_id: str
    fields: dict


@dataclass
class UpdateComment(Command):
    post_id: str
    comment_id: str
    fields: dict


@dataclass
class RemoveComment(Command):
    post_id: str
    comment_id: str


@dataclass
class ToggleLike(Command):
    post_id: str
    user_id: str


@dataclass
class RegisterUser(Command):
    name: str
    surname: str
    email: str
    bio: Optional[str] = None
    title: Optional[str] = None
    area: Optional[str] = None
    image: Optional[str] = None
    experiences: List[dict] = field(default_factory=list)


@dataclass
class DeleteUser(Command):
    user_id: str
