import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from linkedin_api.domain import commands, exceptions
from linkedin_api.entrypoints.dependencies import get_bus, get_uow
from linkedin_api.entrypoints.schemas.user import UserRegister
from linkedin_api.service_layer.messagebus import MessageBus
from linkedin_api.service_layer.unit_of_work import AbstractUnitOfWork
from linkedin_api.views import users as user_views

router = APIRouter(prefix="/users", tags=["users"])

logger = logging.getLogger(__name__)

Bus = Annotated[MessageBus, Depends(get_bus)]
UnitOfWork = Annotated[AbstractUnitOfWork, Depends(get_uow)]


@router.post("", status_code=201)
async def register_user(user: UserRegister, bus: Bus):
    cmd = commands.RegisterUser(
        name=user.name,
        surname=user.surname,
        email=user.email,
        bio=user.bio,
        title=user.title,
        area=user.area,
        image=user.image,
        experiences=[exp.model_dump() for exp in user.experiences],
    )
    [user_id] = await bus.handle(cmd)
    return {"_id": user_id}


@router.get("", status_code=200)
async def get_users(uow: UnitOfWork):
    return await user_views.list_users(uow)


@router.get("/{user_id}", status_code=200)
async def get_user(user_id: str, uow: UnitOfWork):
    user = await user_views.get_user(uow, user_id)
    if not user:
        raise exceptions.UserNotFound(user_id)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, bus: Bus):
    await bus.handle(commands.DeleteUser(user_id=user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
