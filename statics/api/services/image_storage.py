"""
Abstract interface for object storage backends.
Supports S3-compatible services or the local filesystem.
"""
from abc import ABC, abstractmethod


class ImageStorage(ABC):
    """Abstract base class for storage backends that variants are written to"""

    @abstractmethod
    async def put_object(self, key: str, content_type: str, data: bytes) -> None:
        """
        Store `data` publicly readable under `key`.

        Args:
            key: Object name, e.g. `img-2IpSsAjuxB8C-thumb.png`
            content_type: Content-Type the object is served with
            data: Object bytes

        Raises:
            NetworkError: If the backend write fails
        """
        pass

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """
        Get public URL an object is served from. Needs no I/O, so it is
        known before the object is written.

        Args:
            key: Object name

        Returns:
            URL string
        """
        pass
