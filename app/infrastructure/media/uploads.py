import os
import tempfile
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool


def _write_temp(content: bytes, directory: str, suffix: str) -> str:
    os.makedirs(directory, exist_ok=True)
    with tempfile.NamedTemporaryFile(delete=False, dir=directory, suffix=suffix) as tmp:
        tmp.write(content)
        return tmp.name


async def stage_upload(upload: Optional[UploadFile], directory: str) -> Optional[str]:
    """Сохраняет загруженный файл во временную папку и возвращает путь"""
    if upload is None or not upload.filename:
        return None

    content = await upload.read()
    suffix = os.path.splitext(upload.filename)[1]
    return await run_in_threadpool(_write_temp, content, directory, suffix)
