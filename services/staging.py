"""
Staging of uploaded files on local disk before they are forwarded.
"""
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from core.log import get_logger

logger = get_logger("staging")

CHUNK_SIZE = 64 * 1024


class FileRejected(Exception):
    """An uploaded file failed the extension or size checks."""


def check_extension(filename: str, allowed_extensions: List[str]) -> None:
    allowed = tuple(ext.lower() for ext in allowed_extensions)
    if not filename.lower().endswith(allowed):
        raise FileRejected(f"Invalid file type (allowed: {', '.join(allowed)})")


@asynccontextmanager
async def staged_upload(upload: UploadFile, upload_dir: str, max_bytes: int) -> AsyncIterator[Path]:
    """
    Copy an UploadFile to a uniquely named temp file and yield its path.

    The temp file is removed when the block exits, whatever the outcome.
    Raises FileRejected if the content is larger than max_bytes.
    """
    suffix = Path(upload.filename or "").suffix
    fd, name = tempfile.mkstemp(prefix="miq_", suffix=suffix, dir=upload_dir)
    path = Path(name)
    try:
        size = 0
        with os.fdopen(fd, "wb") as out:
            await upload.seek(0)
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise FileRejected(f"File size limit exceeded ({max_bytes // (1024 * 1024)} MB)")
                await run_in_threadpool(out.write, chunk)
        yield path
    finally:
        _remove(path)


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error("Could not delete staged file %s: %s", path, e)


def display_name(upload: UploadFile, fallback: Optional[str] = None) -> str:
    return upload.filename or fallback or "unnamed"
