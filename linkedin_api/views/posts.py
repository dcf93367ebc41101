from __future__ import annotations

from typing import List, Optional, Tuple

from linkedin_api.service_layer.query import MongoQuery
from linkedin_api.service_layer.unit_of_work import AbstractUnitOfWork

POST_AUTHOR_FIELDS = ("_id", "name", "surname", "image")
COMMENT_AUTHOR_FIELDS = ("_id", "name", "surname")


async def populate_authors(uow: AbstractUnitOfWork, docs: List[dict], comments: bool = True) -> List[dict]:
    """
    Replace ``user`` references with user summaries, in place. References to
    users that no longer exist become None.
    """
    author_ids = {doc["user"] for doc in docs if isinstance(doc.get("user"), str)}
    authors = await uow.users.summaries(author_ids, POST_AUTHOR_FIELDS)
    for doc in docs:
        if isinstance(doc.get("user"), str):
            doc["user"] = authors.get(doc["user"])

    if comments:
        all_comments = [c for doc in docs for c in doc.get("comments") or [] if isinstance(c, dict)]
        commenter_ids = {c["user"] for c in all_comments if isinstance(c.get("user"), str)}
        commenters = await uow.users.summaries(commenter_ids, COMMENT_AUTHOR_FIELDS)
        for comment in all_comments:
            if isinstance(comment.get("user"), str):
                comment["user"] = commenters.get(comment["user"])
    return docs


async def list_posts(uow: AbstractUnitOfWork, query: MongoQuery) -> Tuple[List[dict], int]:
    posts = await uow.posts.find(
        query.criteria,
        projection=query.projection,
        skip=query.skip,
        limit=query.limit,
        sort=query.sort,
    )
    total = await uow.posts.count(query.criteria)
    await populate_authors(uow, posts)
    return posts, total


async def get_post(uow: AbstractUnitOfWork, post_id: str) -> Optional[dict]:
    post = await uow.posts.get(post_id)
    if not post:
        return None
    [doc] = await populate_authors(uow, [post.to_dict()], comments=False)
    return doc
