from fastapi import Depends

from linkedin_api.bootstrap import get_message_bus
from linkedin_api.service_layer.messagebus import MessageBus
from linkedin_api.service_layer.unit_of_work import AbstractUnitOfWork


def get_bus() -> MessageBus:
    return get_message_bus()


def get_uow(bus: MessageBus = Depends(get_bus)) -> AbstractUnitOfWork:
    return bus.uow
