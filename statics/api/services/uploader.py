"""
Upload orchestration: multipart body in, public URL of the original variant out.

    received -> field extracted -> format decoded -> variants computed
             -> uploading -> done | failed
"""
import asyncio
import logging
from typing import Mapping

from statics.api.errors import NetworkError, StaticsError
from statics.api.multipart_utils import MultipartRequest, read_file_field
from statics.api.services.image_storage import ImageStorage
from statics.api.services.preprocessor import ImagePreprocessor
from statics.api.services.random_hash import RandomHashGenerator
from statics.api.services.types import ImageFormat, VariantSet, storage_key

logger = logging.getLogger(__name__)

VARIANT_CONTENT_TYPE = "image/png"


class ImageUploader:
    """Runs one upload end to end against shared storage and preprocessing"""

    def __init__(
        self,
        storage: ImageStorage,
        preprocessor: ImagePreprocessor,
        random: RandomHashGenerator,
    ):
        self.storage = storage
        self.preprocessor = preprocessor
        self.random = random

    async def upload_request(self, method: str, headers: Mapping[str, str], body: bytes) -> str:
        """
        Extract the file entry from a buffered multipart request and upload it.

        Returns:
            Public URL of the original variant

        Raises:
            ParseError: multipart body without boundary, entry or content type
            ImageError: unsupported content type or undecodable image
            NetworkError: any storage write failed
        """
        loop = asyncio.get_event_loop()
        part = await loop.run_in_executor(None, read_file_field, MultipartRequest(method, headers, body))
        image_format = ImageFormat.from_subtype(part.subtype)
        return await self.upload_image(image_format, part.data)

    async def upload_image(self, image_format: ImageFormat, data: bytes) -> str:
        """
        Build all variants of an image and write them under one random hash.

        Args:
            image_format: Declared encoding of `data`
            data: Compressed image bytes

        Returns:
            Public URL of the original variant, valid once every write succeeded
        """
        variants = await self.preprocessor.process(image_format, data)
        logger.debug(f"Computed {len(variants)} variants")

        identity = self.random.generate_hash()
        url = self.storage.get_public_url(storage_key(identity))

        await self._upload_variants(identity, variants)
        logger.info(f"Uploaded image {identity}: {url}")
        return url

    async def _upload_variants(self, identity: str, variants: VariantSet) -> None:
        """
        Write every variant concurrently. The first failure fails the batch;
        writes already in flight are neither cancelled nor rolled back.
        """
        await asyncio.gather(*[
            self._put(storage_key(identity, size), data)
            for size, data in variants.items()
        ])

    async def _put(self, key: str, data: bytes) -> None:
        try:
            await self.storage.put_object(key, VARIANT_CONTENT_TYPE, data)
        except StaticsError:
            raise
        except Exception as e:
            logger.error(f"Storage write for {key} failed: {e}")
            raise NetworkError(f"Failed to upload {key}: {e}") from e
