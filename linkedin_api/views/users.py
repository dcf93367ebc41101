from __future__ import annotations

from typing import List, Optional

from linkedin_api.service_layer.unit_of_work import AbstractUnitOfWork


async def list_users(uow: AbstractUnitOfWork) -> List[dict]:
    return [user.to_dict() for user in await uow.users.list_all()]


async def get_user(uow: AbstractUnitOfWork, user_id: str) -> Optional[dict]:
    user = await uow.users.get(user_id)
    return user.to_dict() if user else None
