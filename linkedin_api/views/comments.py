from __future__ import annotations

from typing import List, Optional

from linkedin_api.service_layer.unit_of_work import AbstractUnitOfWork


async def list_comments_for_post(uow: AbstractUnitOfWork, post_id: str) -> Optional[List[dict]]:
    post = await uow.posts.get(post_id)
    if not post:
        return None
    return [comment.to_dict() for comment in post.comments]
