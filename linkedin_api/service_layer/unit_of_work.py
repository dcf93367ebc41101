from __future__ import annotations

import abc
from typing import List

from linkedin_api.db import Database, database as default_database
from linkedin_api.service_layer import repository
from linkedin_api.adapters import repository as mongo_repo


class AbstractUnitOfWork(abc.ABC):
    users: repository.AbstractUserRepository
    posts: repository.AbstractPostRepository

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    def collect_new_events(self) -> List:
        events = []
        for repo in (getattr(self, "users", None), getattr(self, "posts", None)):
            if repo is None:
                continue
            for agg in repo.seen:
                events.extend(getattr(agg, "events", []))
                # clear events after collection
                if hasattr(agg, "events"):
                    agg.events.clear()  # type: ignore[attr-defined]
        return events

    @abc.abstractmethod
    async def commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class MongoUnitOfWork(AbstractUnitOfWork):
    """
    Repositories bound to the shared client. Every repository write is a
    single-document atomic operation, so commit has nothing left to flush
    and rollback has nothing to undo.
    """

    def __init__(self, db: Database | None = None) -> None:
        self.database = db or default_database
        self.committed = False

    @property
    def users(self) -> repository.AbstractUserRepository:  # type: ignore[override]
        if not hasattr(self, "_users"):
            self._users = mongo_repo.MongoUserRepository(self.database.db)
        return self._users

    @property
    def posts(self) -> repository.AbstractPostRepository:  # type: ignore[override]
        if not hasattr(self, "_posts"):
            self._posts = mongo_repo.MongoPostRepository(self.database.db)
        return self._posts

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.committed = False


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self,
        users_repo: repository.AbstractUserRepository,
        posts_repo: repository.AbstractPostRepository,
    ) -> None:
        self.users = users_repo
        self.posts = posts_repo
        self.committed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.committed = False
