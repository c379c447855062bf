"""
Image preprocessing: decode one upload and build every size variant.
Resizing and PNG encoding are CPU-bound and run on a bounded executor.
"""
import asyncio
import io
import logging
import math
from concurrent.futures import Executor
from typing import Optional, Tuple

from PIL import Image

from statics.api.errors import ImageError
from statics.api.services.types import ImageFormat, SizeClass, VariantSet

logger = logging.getLogger(__name__)

# Modes Pillow can write as PNG without conversion
_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}

_DECODE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def target_dimensions(width: int, height: int, size: SizeClass) -> Optional[Tuple[int, int]]:
    """
    Dimensions for `size`, scaling the shorter edge to its target length.

    Returns:
        (width, height) of the resized raster, or None when the image must
        be kept as is (original size class, or target not below the shorter
        edge: images are never upscaled)
    """
    shortest = min(width, height)
    if not size.is_resized or size.value >= shortest:
        return None
    return (
        _round_half_up(width * size.value / shortest),
        _round_half_up(height * size.value / shortest),
    )


def decode_image(image_format: ImageFormat, data: bytes) -> Image.Image:
    """
    Decode `data` strictly as `image_format`.

    Raises:
        ImageError: if bytes are malformed, don't match the declared format,
            or decode to a zero-sized image
    """
    try:
        img = Image.open(io.BytesIO(data), formats=[image_format.value])
        img.load()
    except _DECODE_ERRORS as e:
        raise ImageError(f"Error parsing image with format {image_format}: {e}") from e

    width, height = img.size
    if width == 0 or height == 0:
        raise ImageError("Uploaded image size is zero")

    if img.mode not in _PNG_MODES:
        img = img.convert("RGB")
    return img


def encode_png(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    try:
        img.save(buffer, format="PNG")
    except _DECODE_ERRORS as e:
        raise ImageError(f"Error encoding image: {e}") from e
    return buffer.getvalue()


def resize_image(size: SizeClass, img: Image.Image) -> bytes:
    """Resize `img` for `size` with a triangle filter and encode it as PNG"""
    dimensions = target_dimensions(img.width, img.height, size)
    if dimensions is not None:
        img = img.resize(dimensions, Image.Resampling.BILINEAR)
    return encode_png(img)


class ImagePreprocessor:
    """Turns one compressed image into the full set of PNG variants"""

    def __init__(self, executor: Optional[Executor] = None):
        """
        Args:
            executor: Pool for CPU-bound work. None uses the loop's default.
        """
        self.executor = executor

    async def process(self, image_format: ImageFormat, data: bytes) -> VariantSet:
        """
        Decode `data` and build every size variant.

        The original variant is re-encoded to PNG from the decoded raster,
        like the others. All encodes run concurrently; the first failure
        fails the whole call and no partial set is returned.

        Args:
            image_format: Declared encoding of `data`
            data: Compressed image bytes

        Returns:
            Mapping of every SizeClass to PNG bytes

        Raises:
            ImageError: if decoding or any resize fails
        """
        loop = asyncio.get_event_loop()
        img = await loop.run_in_executor(self.executor, decode_image, image_format, data)
        logger.debug(f"Decoded {image_format} image {img.width}x{img.height}")

        sizes = SizeClass.resized()
        encoded = await asyncio.gather(
            loop.run_in_executor(self.executor, encode_png, img),
            *[loop.run_in_executor(self.executor, resize_image, size, img) for size in sizes],
        )
        return dict(zip([SizeClass.ORIGINAL] + sizes, encoded))
