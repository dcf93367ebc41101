from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from linkedin_api.domain import exceptions

# Free-form payloads: string keys mapped to JSON values (str, number, bool, None, list, dict).
Fields = Dict[str, Any]

RESERVED_POST_KEYS = frozenset({"_id", "likes", "comments", "createdAt", "updatedAt"})
RESERVED_COMMENT_KEYS = frozenset({"_id", "post", "createdAt", "updatedAt"})

DEFAULT_EXPERIENCE_IMAGE = "http://placekitten.com/200/300"

# Same language as /^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$/ without nested quantifiers.
EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_fields(fields: Fields, reserved: Iterable[str]) -> Fields:
    """
    Drop server-maintained keys from a client payload and reject keys the
    document store would read as paths or operators.
    """
    cleaned = {}
    for key, value in fields.items():
        if key in reserved:
            continue
        if not key or key.startswith("$") or "." in key:
            raise exceptions.ValidationError(f"Invalid field name {key!r}")
        cleaned[key] = value
    return cleaned


def normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise exceptions.ValidationError("Please fill a valid email address")
    return email


# --- Entities ---


@dataclass(eq=False)
class Comment:
    id: Optional[str] = None
    post_id: Optional[str] = None
    user: Optional[str] = None
    fields: Fields = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def new(cls, post_id: str, fields: Fields) -> "Comment":
        data = clean_fields(fields, RESERVED_COMMENT_KEYS)
        now = utcnow()
        return cls(
            post_id=post_id,
            user=data.pop("user", None),
            fields=data,
            created_at=now,
            updated_at=now,
        )

    def merge(self, changes: Fields) -> None:
        """Shallow merge: keys not mentioned in ``changes`` are kept."""
        data = clean_fields(changes, RESERVED_COMMENT_KEYS)
        if "user" in data:
            self.user = data.pop("user")
        self.fields.update(data)
        self.updated_at = utcnow()

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            **self.fields,
            "user": self.user,
            "post": self.post_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, doc: dict) -> "Comment":
        data = dict(doc)
        return cls(
            id=data.pop("_id", None),
            post_id=data.pop("post", None),
            user=data.pop("user", None),
            created_at=data.pop("createdAt", None),
            updated_at=data.pop("updatedAt", None),
            fields=data,
        )


@dataclass(eq=False)
class Experience:
    role: Optional[str] = None
    company: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    description: Optional[str] = None
    area: Optional[str] = None
    image: str = DEFAULT_EXPERIENCE_IMAGE
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "role": self.role,
            "company": self.company,
            "startDate": self.startDate,
            "endDate": self.endDate,
            "description": self.description,
            "area": self.area,
            "image": self.image,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, doc: dict) -> "Experience":
        return cls(
            id=doc.get("_id"),
            role=doc.get("role"),
            company=doc.get("company"),
            startDate=doc.get("startDate"),
            endDate=doc.get("endDate"),
            description=doc.get("description"),
            area=doc.get("area"),
            image=doc.get("image") or DEFAULT_EXPERIENCE_IMAGE,
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )


# --- Aggregates ---


@dataclass(eq=False)
class UserAggregate:
    id: Optional[str]
    name: str
    surname: str
    email: str
    bio: Optional[str] = None
    title: Optional[str] = None
    area: Optional[str] = None
    image: Optional[str] = None
    experiences: List[Experience] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    events: list = field(default_factory=list, repr=False)

    @classmethod
    def register(
        cls,
        name: str,
        surname: str,
        email: str,
        bio: Optional[str] = None,
        title: Optional[str] = None,
        area: Optional[str] = None,
        image: Optional[str] = None,
        experiences: Iterable[dict] = (),
    ) -> "UserAggregate":
        if not name or not surname:
            raise exceptions.ValidationError("name and surname are required")
        now = utcnow()
        return cls(
            id=None,
            name=name,
            surname=surname,
            email=normalize_email(email),
            bio=bio,
            title=title,
            area=area,
            image=image,
            experiences=[
                Experience.from_dict({**exp, "createdAt": now, "updatedAt": now})
                for exp in experiences
            ],
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "surname": self.surname,
            "email": self.email,
            "bio": self.bio,
            "title": self.title,
            "area": self.area,
            "image": self.image,
            "experiences": [exp.to_dict() for exp in self.experiences],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def summary(self, fields: Iterable[str]) -> dict:
        doc = self.to_dict()
        return {key: doc.get(key) for key in fields}

    @classmethod
    def from_dict(cls, doc: dict) -> "UserAggregate":
        return cls(
            id=doc.get("_id"),
            name=doc.get("name"),
            surname=doc.get("surname"),
            email=doc.get("email"),
            bio=doc.get("bio"),
            title=doc.get("title"),
            area=doc.get("area"),
            image=doc.get("image"),
            experiences=[Experience.from_dict(e) for e in doc.get("experiences") or []],
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )


@dataclass(eq=False)
class PostAggregate:
    id: Optional[str] = None
    user: Optional[str] = None
    image: Optional[str] = None
    fields: Fields = field(default_factory=dict)
    likes: List[str] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    events: list = field(default_factory=list, repr=False)

    @classmethod
    def new(cls, fields: Fields) -> "PostAggregate":
        data = clean_fields(fields, RESERVED_POST_KEYS)
        now = utcnow()
        return cls(
            user=data.pop("user", None),
            image=data.pop("image", None),
            fields=data,
            created_at=now,
            updated_at=now,
        )

    @property
    def number_of_likes(self) -> int:
        return len(self.likes)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def update(self, changes: Fields) -> None:
        data = clean_fields(changes, RESERVED_POST_KEYS)
        if "user" in data:
            self.user = data.pop("user")
        if "image" in data:
            self.image = data.pop("image")
        self.fields.update(data)
        self.touch()

    def add_comment(self, comment: Comment) -> Comment:
        comment.post_id = self.id
        self.comments.append(comment)
        self.touch()
        return comment

    def find_comment(self, comment_id: str) -> Optional[Comment]:
        return next((c for c in self.comments if c.id == comment_id), None)

    def update_comment(self, comment_id: str, changes: Fields) -> Optional[Comment]:
        comment = self.find_comment(comment_id)
        if comment is None:
            return None
        comment.merge(changes)
        self.touch()
        return comment

    def remove_comment(self, comment_id: str) -> Optional[Comment]:
        comment = self.find_comment(comment_id)
        if comment is not None:
            self.comments.remove(comment)
            self.touch()
        return comment

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in self.likes

    def toggle_like(self, user_id: str) -> bool:
        """Flip ``user_id`` membership in likes. Returns True when the post is now liked."""
        self.touch()
        if user_id in self.likes:
            self.likes = [uid for uid in self.likes if uid != user_id]
            return False
        self.likes.append(user_id)
        return True

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            **self.fields,
            "user": self.user,
            "image": self.image,
            "likes": list(self.likes),
            "comments": [c.to_dict() for c in self.comments],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, doc: dict) -> "PostAggregate":
        data = dict(doc)
        return cls(
            id=data.pop("_id", None),
            user=data.pop("user", None),
            image=data.pop("image", None),
            likes=list(data.pop("likes", None) or []),
            comments=[Comment.from_dict(c) for c in data.pop("comments", None) or []],
            created_at=data.pop("createdAt", None),
            updated_at=data.pop("updatedAt", None),
            fields=data,
        )
