from __future__ import annotations

import abc
import logging
from typing import List, NamedTuple

from linkedin_api.config import config
from linkedin_api.libs import b2

logger = logging.getLogger(__name__)


class AbstractFileStorage(abc.ABC):
    @abc.abstractmethod
    def upload(self, local_path: str, file_name: str) -> str:
        """Store the file durably and return its public URL."""
        raise NotImplementedError


class B2FileStorage(AbstractFileStorage):
    """Post images go under one bucket folder, keyed by ``{post_id}/{file name}``."""

    def __init__(self, folder: str | None = None):
        self.folder = (folder if folder is not None else config.POST_IMAGE_FOLDER).strip("/")

    def remote_name(self, file_name: str) -> str:
        return f"{self.folder}/{file_name}" if self.folder else file_name

    def upload(self, local_path: str, file_name: str) -> str:
        remote_name = self.remote_name(file_name)
        logger.debug("Uploading %s to B2 as %s", local_path, remote_name)
        return b2.b2_upload_file(local_file=local_path, file_name=remote_name)


class Upload(NamedTuple):
    local_path: str
    file_name: str
    url: str


class FakeFileStorage(AbstractFileStorage):
    def __init__(self, base_url: str = "https://fake.local"):
        self.base_url = base_url.rstrip("/")
        self.uploads: List[Upload] = []

    def upload(self, local_path: str, file_name: str) -> str:
        url = f"{self.base_url}/{file_name}"
        self.uploads.append(Upload(local_path, file_name, url))
        return url
