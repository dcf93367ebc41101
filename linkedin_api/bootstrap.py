from __future__ import annotations

from functools import partial
from typing import Dict, List, Type

from linkedin_api.adapters.storage import AbstractFileStorage, B2FileStorage
from linkedin_api.domain import commands, events
from linkedin_api.service_layer import handlers, unit_of_work
from linkedin_api.service_layer.messagebus import MessageBus
from linkedin_api.service_layer.unit_of_work import MongoUnitOfWork


def bootstrap(
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    file_storage: AbstractFileStorage | None = None,
) -> MessageBus:
    uow = uow or MongoUnitOfWork()
    file_storage = file_storage or B2FileStorage()

    command_handlers: Dict[Type[commands.Command], callable] = {
        commands.CreatePost: partial(handlers.create_post, uow=uow),
        commands.UpdatePost: partial(handlers.update_post, uow=uow),
        commands.DeletePost: partial(handlers.delete_post, uow=uow),
        commands.AttachPostImage: partial(handlers.attach_post_image, uow=uow, file_storage=file_storage.upload),
        commands.AddComment: partial(handlers.add_comment, uow=uow),
        commands.UpdateComment: partial(handlers.update_comment, uow=uow),
        commands.RemoveComment: partial(handlers.remove_comment, uow=uow),
        commands.ToggleLike: partial(handlers.toggle_like, uow=uow),
        commands.RegisterUser: partial(handlers.register_user, uow=uow),
        commands.DeleteUser: partial(handlers.delete_user, uow=uow),
    }

    event_handlers: Dict[Type[events.Event], List[callable]] = {
        events.PostCreated: [partial(handlers.handle_post_created, uow=uow)],
        events.PostImageAttached: [partial(handlers.handle_post_image_attached, uow=uow)],
        events.CommentAdded: [partial(handlers.handle_comment_added, uow=uow)],
        events.LikeToggled: [partial(handlers.handle_like_toggled, uow=uow)],
        events.UserRegistered: [partial(handlers.handle_user_registered, uow=uow)],
    }

    return MessageBus(uow=uow, event_handlers=event_handlers, command_handlers=command_handlers)


def get_message_bus() -> MessageBus:
    """
    One bus per request: the unit of work tracks the aggregates a request
    touched, so it must not be shared between concurrent requests. The
    client it wraps is shared.
    """
    return bootstrap()
