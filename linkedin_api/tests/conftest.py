from typing import AsyncGenerator
import os

# Force test configuration for all imports
os.environ.setdefault("ENV", "test")

import pytest
from httpx import AsyncClient, ASGITransport

from linkedin_api import bootstrap
from linkedin_api.adapters.storage import FakeFileStorage
from linkedin_api.entrypoints.dependencies import get_bus
from linkedin_api.main import app
from linkedin_api.service_layer.unit_of_work import FakeUnitOfWork
from linkedin_api.tests.fakes import FakePostRepository, FakeUserRepository, make_user


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def uow() -> FakeUnitOfWork:
    return FakeUnitOfWork(FakeUserRepository(), FakePostRepository())


@pytest.fixture()
def file_storage() -> FakeFileStorage:
    return FakeFileStorage()


@pytest.fixture()
def bus(uow, file_storage):
    return bootstrap.bootstrap(uow=uow, file_storage=file_storage)


@pytest.fixture()
async def async_client(bus) -> AsyncGenerator:
    """A client for making asynchronous requests to the app, wired to in-memory fakes."""
    app.dependency_overrides[get_bus] = lambda: bus
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver", timeout=5.0) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def existing_user(uow) -> dict:
    user = make_user()
    await uow.users.add(user)
    return user.to_dict()


@pytest.fixture()
async def created_post(async_client: AsyncClient) -> dict:
    response = await async_client.post("/posts", json={"text": "hello"})
    assert response.status_code == 201, response.text
    return response.json()
