from __future__ import annotations

from typing import BinaryIO, Iterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ...repositories.interfaces import PhotoStorageInterface
from ...services.catalog_service import get_photo_storage


router = APIRouter()

CHUNK_SIZE = 256 * 1024


def _iter_chunks(stream: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


@router.get("/{file_id}", summary="주문 사진 / 모델 이미지 다운로드")
def get_photo(
    file_id: str,
    storage: PhotoStorageInterface = Depends(get_photo_storage),
) -> StreamingResponse:
    opened = storage.open(file_id)
    if opened is None:
        raise HTTPException(status_code=404, detail="photo not found")
    stream, filename, content_type = opened
    headers = {}
    if filename:
        headers["Content-Disposition"] = f'inline; filename="{filename}"'
    return StreamingResponse(_iter_chunks(stream), media_type=content_type, headers=headers)
