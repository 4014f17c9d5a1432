"""GridFS 기반 사진 저장소.

업로드한 파일은 "{base_url}/{file_id}" 형태의 URL 로 노출되며, 같은 서비스의
/api/v1/photos/{file_id} 라우트가 GridFS 에서 읽어 스트리밍한다.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

import gridfs
from bson import ObjectId
from pymongo.database import Database

from .interfaces import PhotoStorageInterface


logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class GridFSPhotoStorage(PhotoStorageInterface):
    def __init__(self, database: Database, base_url: str, collection: str = "photos") -> None:
        self._fs = gridfs.GridFS(database, collection=collection)
        self._base_url = base_url.rstrip("/")

    def upload(
        self, owner: str, filename: str, data: bytes, content_type: str | None
    ) -> str:
        file_id = self._fs.put(
            data,
            filename=filename,
            metadata={"owner": owner, "content_type": content_type or DEFAULT_CONTENT_TYPE},
        )
        return f"{self._base_url}/{file_id}"

    def file_id_from_url(self, url: str) -> str | None:
        candidate = url.rstrip("/").rsplit("/", 1)[-1]
        if not ObjectId.is_valid(candidate):
            return None
        return candidate

    def delete(self, url: str) -> bool:
        file_id = self.file_id_from_url(url)
        if file_id is None:
            logger.warning("photo url is not a stored file: %s", url)
            return False
        self._fs.delete(ObjectId(file_id))
        return True

    def open(self, file_id: str) -> tuple[BinaryIO, str | None, str] | None:
        if not ObjectId.is_valid(file_id):
            return None
        try:
            grid_out = self._fs.get(ObjectId(file_id))
        except gridfs.NoFile:
            return None
        metadata = grid_out.metadata or {}
        return grid_out, grid_out.filename, metadata.get("content_type", DEFAULT_CONTENT_TYPE)
