import logging
import os
import tempfile
from typing import Annotated, Optional

import aiofiles
from fastapi import APIRouter, Depends, File, UploadFile

from linkedin_api.domain import commands, exceptions
from linkedin_api.entrypoints.dependencies import get_bus
from linkedin_api.service_layer.messagebus import MessageBus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

CHUNK_SIZE = 1024 * 1024


@router.post("/{post_id}/image", status_code=200)
async def upload_post_image(
    post_id: str,
    bus: Annotated[MessageBus, Depends(get_bus)],
    post: Optional[UploadFile] = File(None),
):
    if post is None or not post.filename:
        raise exceptions.BadRequest("upload an image")

    file_name = os.path.basename(post.filename)
    if file_name in ("", ".", ".."):
        raise exceptions.BadRequest(f"invalid file name {post.filename!r}")

    with tempfile.TemporaryDirectory() as temp_dir:
        # the client name only labels the stored object, never the local path
        filename = os.path.join(temp_dir, "upload")
        logger.info(f"Saving uploaded file temporarily to {filename}")
        async with aiofiles.open(filename, "wb") as f:
            while chunk := await post.read(CHUNK_SIZE):
                await f.write(chunk)

        cmd = commands.AttachPostImage(post_id=post_id, file_name=file_name, local_path=filename)
        await bus.handle(cmd)

    return "uploaded"
