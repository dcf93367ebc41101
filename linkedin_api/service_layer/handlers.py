from __future__ import annotations

import logging
from typing import Callable

from anyio import to_thread

from linkedin_api.domain import commands, events, exceptions, model
from linkedin_api.service_layer import unit_of_work

logger = logging.getLogger(__name__)


# --- Post command handlers ---


async def create_post(cmd: commands.CreatePost, uow: unit_of_work.AbstractUnitOfWork) -> str:
    post = model.PostAggregate.new(cmd.fields)
    await uow.posts.add(post)
    post.events.append(events.PostCreated(post_id=post.id, user_id=post.user))
    await uow.commit()
    return post.id


async def update_post(cmd: commands.UpdatePost, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    changes = model.clean_fields(cmd.fields, model.RESERVED_POST_KEYS)
    post = await uow.posts.update_fields(cmd.post_id, changes)
    if post is None:
        raise exceptions.PostNotFound(cmd.post_id)
    await uow.commit()
    return post


async def delete_post(cmd: commands.DeletePost, uow: unit_of_work.AbstractUnitOfWork) -> str:
    if not await uow.posts.delete(cmd.post_id):
        raise exceptions.PostNotFound(cmd.post_id)
    await uow.commit()
    return cmd.post_id


async def attach_post_image(
    cmd: commands.AttachPostImage,
    uow: unit_of_work.AbstractUnitOfWork,
    file_storage: Callable[[str, str], str],
) -> str:
    # the post must exist before anything reaches storage
    if await uow.posts.get(cmd.post_id) is None:
        raise exceptions.PostNotFound(cmd.post_id)
    image_url = await to_thread.run_sync(file_storage, cmd.local_path, f"{cmd.post_id}/{cmd.file_name}")
    post = await uow.posts.update_fields(cmd.post_id, {"image": image_url})
    if post is None:
        raise exceptions.PostNotFound(cmd.post_id)
    post.events.append(events.PostImageAttached(post_id=post.id, image_url=image_url))
    await uow.commit()
    return image_url


# --- Comment command handlers ---


async def add_comment(cmd: commands.AddComment, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    comment = model.Comment.new(cmd.post_id, cmd.fields)
    # The repository assigns the comment id as part of the push
    post = await uow.posts.push_comment(cmd.post_id, comment)
    if post is None:
        raise exceptions.PostNotFound(cmd.post_id)
    post.events.append(events.CommentAdded(post_id=post.id, comment_id=comment.id, user_id=comment.user))
    await uow.commit()
    return post


async def update_comment(cmd: commands.UpdateComment, uow: unit_of_work.AbstractUnitOfWork) -> model.Comment:
    changes = model.clean_fields(cmd.fields, model.RESERVED_COMMENT_KEYS)
    comment = await uow.posts.update_comment(cmd.post_id, cmd.comment_id, changes)
    if comment is None:
        if await uow.posts.get(cmd.post_id) is None:
            raise exceptions.PostNotFound(cmd.post_id)
        raise exceptions.CommentNotFound(cmd.comment_id)
    await uow.commit()
    return comment


async def remove_comment(cmd: commands.RemoveComment, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    # Removing an unknown comment id is a no-op: the pull simply matches nothing
    post = await uow.posts.pull_comment(cmd.post_id, cmd.comment_id)
    if post is None:
        raise exceptions.PostNotFound(cmd.post_id)
    await uow.commit()
    return post


# --- Like command handlers ---


async def toggle_like(cmd: commands.ToggleLike, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    if await uow.posts.get(cmd.post_id) is None:
        raise exceptions.PostNotFound(cmd.post_id)
    if not await uow.users.exists(cmd.user_id):
        raise exceptions.UserNotFound(cmd.user_id)
    post = await uow.posts.toggle_like(cmd.post_id, cmd.user_id)
    if post is None:
        raise exceptions.PostNotFound(cmd.post_id)
    post.events.append(
        events.LikeToggled(
            post_id=post.id,
            user_id=cmd.user_id,
            liked=post.is_liked_by(cmd.user_id),
            number_of_likes=post.number_of_likes,
        )
    )
    await uow.commit()
    return post


# --- User command handlers ---


async def register_user(cmd: commands.RegisterUser, uow: unit_of_work.AbstractUnitOfWork) -> str:
    user = model.UserAggregate.register(
        name=cmd.name,
        surname=cmd.surname,
        email=cmd.email,
        bio=cmd.bio,
        title=cmd.title,
        area=cmd.area,
        image=cmd.image,
        experiences=cmd.experiences,
    )
    await uow.users.add(user)
    user.events.append(events.UserRegistered(user_id=user.id, email=user.email))
    await uow.commit()
    return user.id


async def delete_user(cmd: commands.DeleteUser, uow: unit_of_work.AbstractUnitOfWork) -> str:
    if not await uow.users.delete(cmd.user_id):
        raise exceptions.UserNotFound(cmd.user_id)
    await uow.commit()
    return cmd.user_id


# --- Event handlers ---


async def handle_post_created(event: events.PostCreated, uow: unit_of_work.AbstractUnitOfWork):
    logger.info("Post %s created by user %s", event.post_id, event.user_id)


async def handle_post_image_attached(event: events.PostImageAttached, uow: unit_of_work.AbstractUnitOfWork):
    logger.info("Image for post %s stored at %s", event.post_id, event.image_url)


async def handle_comment_added(event: events.CommentAdded, uow: unit_of_work.AbstractUnitOfWork):
    logger.info("Comment %s added to post %s", event.comment_id, event.post_id)


async def handle_like_toggled(event: events.LikeToggled, uow: unit_of_work.AbstractUnitOfWork):
    logger.info(
        "User %s %s post %s (%d likes)",
        event.user_id,
        "liked" if event.liked else "unliked",
        event.post_id,
        event.number_of_likes,
    )


async def handle_user_registered(event: events.UserRegistered, uow: unit_of_work.AbstractUnitOfWork):
    logger.info("User %s registered", event.user_id)
