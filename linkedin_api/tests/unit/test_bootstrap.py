import pytest

from linkedin_api import bootstrap
from linkedin_api.adapters.storage import FakeFileStorage
from linkedin_api.domain import commands
from linkedin_api.service_layer.unit_of_work import FakeUnitOfWork
from linkedin_api.tests.fakes import FakePostRepository, FakeUserRepository


@pytest.mark.anyio
async def test_bootstrap_wires_handlers_with_overrides():
    storage = FakeFileStorage()
    uow = FakeUnitOfWork(FakeUserRepository(), FakePostRepository())

    bus = bootstrap.bootstrap(uow=uow, file_storage=storage)

    [post_id] = await bus.handle(commands.CreatePost(fields={"text": "hello"}))
    assert (await uow.posts.get(post_id)).fields == {"text": "hello"}

    result = await bus.handle(
        commands.AttachPostImage(post_id=post_id, file_name="pic.png", local_path="/tmp/pic.png")
    )
    assert result == [f"https://fake.local/{post_id}/pic.png"]
    assert storage.uploads[-1][1] == f"{post_id}/pic.png"


def test_bootstrap_covers_every_command():
    bus = bootstrap.bootstrap(
        uow=FakeUnitOfWork(FakeUserRepository(), FakePostRepository()),
        file_storage=FakeFileStorage(),
    )

    expected = {
        commands.CreatePost,
        commands.UpdatePost,
        commands.DeletePost,
        commands.AttachPostImage,
        commands.AddComment,
        commands.UpdateComment,
        commands.RemoveComment,
        commands.ToggleLike,
        commands.RegisterUser,
        commands.DeleteUser,
    }
    assert set(bus.command_handlers) == expected
