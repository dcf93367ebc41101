from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Optional, Sequence, Set

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from linkedin_api.domain import exceptions, model
from linkedin_api.service_layer import repository as abs_repo

logger = logging.getLogger(__name__)

OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")

REFERENCE_KEYS = ("user",)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Only 24-hex strings count as ids; anything else simply never matches."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and OBJECT_ID.match(value):
        return ObjectId(value)
    return None


def to_public(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: to_public(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_public(v) for v in value]
    return value


def _ref(value: Any) -> Any:
    oid = to_object_id(value)
    return oid if oid is not None else value


def _with_refs(fields: dict) -> dict:
    return {k: _ref(v) if k in REFERENCE_KEYS else v for k, v in fields.items()}


def _comment_document(comment: model.Comment) -> dict:
    doc = comment.to_dict()
    for key in ("_id", "user", "post"):
        doc[key] = _ref(doc[key])
    return doc


def _post_document(post: model.PostAggregate) -> dict:
    doc = post.to_dict()
    doc.pop("_id")
    doc["user"] = _ref(doc["user"])
    doc["likes"] = [_ref(uid) for uid in doc["likes"]]
    doc["comments"] = [_comment_document(c) for c in post.comments]
    return doc


def _hydrate_post(doc: Optional[dict]) -> Optional[model.PostAggregate]:
    if doc is None:
        return None
    return model.PostAggregate.from_dict(to_public(doc))


@contextmanager
def translate_errors():
    try:
        yield
    except PyMongoError as e:
        logger.exception("Document store call failed")
        raise exceptions.StoreError(str(e)) from e


class MongoUserRepository(abs_repo.AbstractUserRepository):
    def __init__(self, db) -> None:
        super().__init__()
        self.collection = db["users"]

    async def _add(self, user: model.UserAggregate) -> None:
        for experience in user.experiences:
            experience.id = str(ObjectId())
        doc = user.to_dict()
        doc.pop("_id")
        for experience in doc["experiences"]:
            experience["_id"] = ObjectId(experience["_id"])
        with translate_errors():
            result = await self.collection.insert_one(doc)
        user.id = str(result.inserted_id)

    async def _get(self, user_id: str) -> Optional[model.UserAggregate]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        with translate_errors():
            doc = await self.collection.find_one({"_id": oid})
        return model.UserAggregate.from_dict(to_public(doc)) if doc else None

    async def _list_all(self) -> Iterable[model.UserAggregate]:
        with translate_errors():
            docs = await self.collection.find({}).to_list(None)
        return [model.UserAggregate.from_dict(to_public(doc)) for doc in docs]

    async def _delete(self, user_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        with translate_errors():
            result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1

    async def _exists(self, user_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        with translate_errors():
            return await self.collection.count_documents({"_id": oid}, limit=1) > 0

    async def _summaries(self, user_ids: Set[str], fields: Sequence[str]) -> Dict[str, dict]:
        oids = [oid for oid in map(to_object_id, user_ids) if oid is not None]
        if not oids:
            return {}
        with translate_errors():
            docs = await self.collection.find(
                {"_id": {"$in": oids}}, {field: 1 for field in fields}
            ).to_list(None)
        return {str(doc["_id"]): to_public(doc) for doc in docs}


class MongoPostRepository(abs_repo.AbstractPostRepository):
    def __init__(self, db) -> None:
        super().__init__()
        self.collection = db["posts"]

    async def _add(self, post: model.PostAggregate) -> None:
        with translate_errors():
            result = await self.collection.insert_one(_post_document(post))
        post.id = str(result.inserted_id)

    async def _get(self, post_id: str) -> Optional[model.PostAggregate]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        with translate_errors():
            doc = await self.collection.find_one({"_id": oid})
        return _hydrate_post(doc)

    async def _update_fields(self, post_id: str, fields: dict) -> Optional[model.PostAggregate]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        changes = {**_with_refs(fields), "updatedAt": model.utcnow()}
        with translate_errors():
            doc = await self.collection.find_one_and_update(
                {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        return _hydrate_post(doc)

    async def _delete(self, post_id: str) -> bool:
        oid = to_object_id(post_id)
        if oid is None:
            return False
        with translate_errors():
            result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1

    async def _push_comment(self, post_id: str, comment: model.Comment) -> Optional[model.PostAggregate]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        comment.id = str(ObjectId())
        comment.post_id = post_id
        with translate_errors():
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {
                    "$push": {"comments": _comment_document(comment)},
                    "$set": {"updatedAt": comment.created_at or model.utcnow()},
                },
                return_document=ReturnDocument.AFTER,
            )
        return _hydrate_post(doc)

    async def _update_comment(self, post_id: str, comment_id: str, fields: dict) -> Optional[model.Comment]:
        oid, cid = to_object_id(post_id), to_object_id(comment_id)
        if oid is None or cid is None:
            return None
        now = model.utcnow()
        # positional operator: only the element matched by "comments._id" is touched
        changes = {f"comments.$.{key}": value for key, value in _with_refs(fields).items()}
        changes.update({"comments.$.updatedAt": now, "updatedAt": now})
        with translate_errors():
            doc = await self.collection.find_one_and_update(
                {"_id": oid, "comments._id": cid},
                {"$set": changes},
                projection={"comments": {"$elemMatch": {"_id": cid}}},
                return_document=ReturnDocument.AFTER,
            )
        if not doc or not doc.get("comments"):
            return None
        return model.Comment.from_dict(to_public(doc["comments"][0]))

    async def _pull_comment(self, post_id: str, comment_id: str) -> Optional[model.PostAggregate]:
        oid, cid = to_object_id(post_id), to_object_id(comment_id)
        if oid is None:
            return None
        if cid is None:
            return await self._get(post_id)
        with translate_errors():
            doc = await self.collection.find_one_and_update(
                {"_id": oid, "comments._id": cid},
                {"$pull": {"comments": {"_id": cid}}, "$set": {"updatedAt": model.utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            # nothing pulled: the post is returned untouched, or None when it is absent
            return await self._get(post_id)
        return _hydrate_post(doc)

    async def _toggle_like(self, post_id: str, user_id: str) -> Optional[model.PostAggregate]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        uid = _ref(user_id)
        likes = {"$ifNull": ["$likes", []]}
        toggle = [
            {
                "$set": {
                    "likes": {
                        "$cond": {
                            "if": {"$in": [uid, likes]},
                            "then": {"$filter": {"input": likes, "cond": {"$ne": ["$$this", uid]}}},
                            "else": {"$concatArrays": [likes, [uid]]},
                        }
                    },
                    "updatedAt": model.utcnow(),
                }
            }
        ]
        with translate_errors():
            doc = await self.collection.find_one_and_update(
                {"_id": oid}, toggle, return_document=ReturnDocument.AFTER
            )
        return _hydrate_post(doc)

    async def _find(self, criteria, projection, skip, limit, sort) -> Iterable[dict]:
        with translate_errors():
            cursor = self.collection.find(criteria, projection or None, skip=skip, limit=limit)
            if sort:
                cursor = cursor.sort(list(sort))
            docs = await cursor.to_list(None)
        return [to_public(doc) for doc in docs]

    async def _count(self, criteria: dict) -> int:
        with translate_errors():
            return await self.collection.count_documents(criteria)
