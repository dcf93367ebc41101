from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from linkedin_api.config import config
from linkedin_api.domain import commands, exceptions
from linkedin_api.entrypoints.dependencies import get_bus, get_uow
from linkedin_api.entrypoints.schemas.post import CommentI, PostI, PostLikeI
from linkedin_api.service_layer.messagebus import MessageBus
from linkedin_api.service_layer.query import parse_query
from linkedin_api.service_layer.unit_of_work import AbstractUnitOfWork
from linkedin_api.views import comments as comment_views
from linkedin_api.views import posts as post_views

router = APIRouter(prefix="/posts", tags=["posts"])

Bus = Annotated[MessageBus, Depends(get_bus)]
UnitOfWork = Annotated[AbstractUnitOfWork, Depends(get_uow)]


@router.post("", status_code=201)
async def create_post(post: PostI, bus: Bus):
    cmd = commands.CreatePost(fields=post.model_dump(exclude_unset=True))
    [post_id] = await bus.handle(cmd)
    return {"_id": post_id}


@router.get("", status_code=200)
async def get_all_posts(request: Request, uow: UnitOfWork):
    query = parse_query(request.url.query, config.DEFAULT_PAGE_LIMIT, config.MAX_PAGE_LIMIT)
    posts, total = await post_views.list_posts(uow, query)
    base_url = config.PAGINATION_POSTS or str(request.url.replace(query=""))
    return {
        "links": query.links(base_url, total),
        "total": total,
        "numberOfPages": query.number_of_pages(total),
        "posts": posts,
    }


@router.get("/{post_id}", status_code=200)
async def get_post(post_id: str, uow: UnitOfWork):
    post = await post_views.get_post(uow, post_id)
    if not post:
        raise exceptions.PostNotFound(post_id)
    return post


@router.put("/{post_id}", status_code=200)
async def update_post(post_id: str, post: PostI, bus: Bus):
    cmd = commands.UpdatePost(post_id=post_id, fields=post.model_dump(exclude_unset=True))
    [updated] = await bus.handle(cmd)
    return updated.to_dict()


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: str, bus: Bus):
    await bus.handle(commands.DeletePost(post_id=post_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/comments", status_code=200)
async def create_comment(post_id: str, comment: CommentI, bus: Bus):
    cmd = commands.AddComment(post_id=post_id, fields=comment.model_dump(exclude_unset=True))
    [post] = await bus.handle(cmd)
    return post.to_dict()


@router.get("/{post_id}/comments", status_code=200)
async def get_comments_on_post(post_id: str, uow: UnitOfWork):
    comments = await comment_views.list_comments_for_post(uow, post_id)
    if comments is None:
        raise exceptions.PostNotFound(post_id)
    return comments


@router.put("/{post_id}/comments/{comment_id}", status_code=200)
async def update_comment(post_id: str, comment_id: str, comment: CommentI, bus: Bus):
    cmd = commands.UpdateComment(
        post_id=post_id,
        comment_id=comment_id,
        fields=comment.model_dump(exclude_unset=True),
    )
    [updated] = await bus.handle(cmd)
    return updated.to_dict()


@router.delete("/{post_id}/comments/{comment_id}", status_code=200)
async def delete_comment(post_id: str, comment_id: str, bus: Bus):
    [post] = await bus.handle(commands.RemoveComment(post_id=post_id, comment_id=comment_id))
    return {"deleted": "deleted", "updatedPost": post.to_dict()}


@router.post("/{post_id}/like", status_code=200)
async def like_post(post_id: str, like: PostLikeI, bus: Bus):
    [post] = await bus.handle(commands.ToggleLike(post_id=post_id, user_id=like.userId))
    return {"post": post.to_dict(), "numberOfLikes": post.number_of_likes}
