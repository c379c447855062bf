"""
Local filesystem implementation of ImageStorage.
Useful for development without an S3 endpoint; objects are plain files.
"""
import asyncio
import logging
from pathlib import Path

from statics.api.errors import NetworkError
from statics.api.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(ImageStorage):
    """Local filesystem storage, one file per object key"""

    def __init__(
        self,
        base_path: str = "./storage/images",
        base_url: str = "http://localhost:8000/static",
    ):
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")

        # Create directory if it doesn't exist
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _object_path(self, key: str) -> Path:
        return self.base_path / key

    async def put_object(self, key: str, content_type: str, data: bytes) -> None:
        """Write object bytes; content type is implied by the key extension"""
        file_path = self._object_path(key)

        # Use executor to avoid blocking event loop
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, file_path.write_bytes, data)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            raise NetworkError(f"Failed to store {key}: {e}") from e

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"
