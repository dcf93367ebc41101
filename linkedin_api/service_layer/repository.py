from __future__ import annotations

import abc
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from linkedin_api.domain.model import Comment, PostAggregate, UserAggregate

SortSpec = Sequence[Tuple[str, int]]


class AbstractUserRepository(abc.ABC):
    """Users store; also serves as the identity resolver for likes and population."""

    def __init__(self) -> None:
        self.seen: Set[UserAggregate] = set()

    async def add(self, user: UserAggregate) -> UserAggregate:
        await self._add(user)
        self.seen.add(user)
        return user

    async def get(self, user_id: str) -> Optional[UserAggregate]:
        user = await self._get(user_id)
        if user:
            self.seen.add(user)
        return user

    async def list_all(self) -> List[UserAggregate]:
        return list(await self._list_all())

    async def delete(self, user_id: str) -> bool:
        return await self._delete(user_id)

    async def exists(self, user_id: str) -> bool:
        return await self._exists(user_id)

    async def summaries(self, user_ids: Iterable[str], fields: Sequence[str]) -> Dict[str, dict]:
        """Map each known user id to a dict holding only ``fields``."""
        ids = {uid for uid in user_ids if uid}
        if not ids:
            return {}
        return await self._summaries(ids, fields)

    @abc.abstractmethod
    async def _add(self, user: UserAggregate) -> None: ...

    @abc.abstractmethod
    async def _get(self, user_id: str) -> Optional[UserAggregate]: ...

    @abc.abstractmethod
    async def _list_all(self) -> Iterable[UserAggregate]: ...

    @abc.abstractmethod
    async def _delete(self, user_id: str) -> bool: ...

    @abc.abstractmethod
    async def _exists(self, user_id: str) -> bool: ...

    @abc.abstractmethod
    async def _summaries(self, user_ids: Set[str], fields: Sequence[str]) -> Dict[str, dict]: ...


class AbstractPostRepository(abc.ABC):
    """
    Posts store. Every mutation is a single-document operation: comment
    push/pull/update and the like toggle never read the post back before
    writing, so concurrent requests cannot lose each other's changes.
    """

    def __init__(self) -> None:
        self.seen: Set[PostAggregate] = set()

    async def add(self, post: PostAggregate) -> PostAggregate:
        await self._add(post)
        self.seen.add(post)
        return post

    async def get(self, post_id: str) -> Optional[PostAggregate]:
        return self._track(await self._get(post_id))

    async def update_fields(self, post_id: str, fields: dict) -> Optional[PostAggregate]:
        return self._track(await self._update_fields(post_id, fields))

    async def delete(self, post_id: str) -> bool:
        return await self._delete(post_id)

    async def push_comment(self, post_id: str, comment: Comment) -> Optional[PostAggregate]:
        """Append ``comment``, assigning its id. Returns the updated post or None."""
        return self._track(await self._push_comment(post_id, comment))

    async def update_comment(self, post_id: str, comment_id: str, fields: dict) -> Optional[Comment]:
        """Merge ``fields`` into one comment. None when the post or comment does not match."""
        return await self._update_comment(post_id, comment_id, fields)

    async def pull_comment(self, post_id: str, comment_id: str) -> Optional[PostAggregate]:
        return self._track(await self._pull_comment(post_id, comment_id))

    async def toggle_like(self, post_id: str, user_id: str) -> Optional[PostAggregate]:
        return self._track(await self._toggle_like(post_id, user_id))

    async def find(
        self,
        criteria: dict,
        projection: Optional[dict] = None,
        skip: int = 0,
        limit: int = 0,
        sort: SortSpec = (),
    ) -> List[dict]:
        """Read-side query returning plain documents (possibly projected)."""
        return list(await self._find(criteria, projection, skip, limit, sort))

    async def count(self, criteria: dict) -> int:
        return await self._count(criteria)

    def _track(self, post: Optional[PostAggregate]) -> Optional[PostAggregate]:
        if post:
            self.seen.add(post)
        return post

    @abc.abstractmethod
    async def _add(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    async def _get(self, post_id: str) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    async def _update_fields(self, post_id: str, fields: dict) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    async def _delete(self, post_id: str) -> bool: ...

    @abc.abstractmethod
    async def _push_comment(self, post_id: str, comment: Comment) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    async def _update_comment(self, post_id: str, comment_id: str, fields: dict) -> Optional[Comment]: ...

    @abc.abstractmethod
    async def _pull_comment(self, post_id: str, comment_id: str) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    async def _toggle_like(self, post_id: str, user_id: str) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    async def _find(
        self, criteria: dict, projection: Optional[dict], skip: int, limit: int, sort: SortSpec
    ) -> Iterable[dict]: ...

    @abc.abstractmethod
    async def _count(self, criteria: dict) -> int: ...
