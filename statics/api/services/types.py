"""Shared types for image variants and their storage keys"""
from enum import Enum
from typing import Dict, Optional

from statics.api.errors import ImageError

# All variants of one upload share this prefix and the upload's random hash
KEY_PREFIX = "img-"


class SizeClass(Enum):
    """Variant sizes stored for traffic optimization.

    The value is the target length in pixels of the image's shorter edge.
    ORIGINAL is a sentinel meaning "don't resize".
    """
    THUMB = 40
    SMALL = 80
    MEDIUM = 320
    LARGE = 640
    ORIGINAL = 0

    @property
    def tag(self) -> str:
        return self.name.lower()

    @property
    def is_resized(self) -> bool:
        return self is not SizeClass.ORIGINAL

    @classmethod
    def resized(cls):
        return [size for size in cls if size.is_resized]


class ImageFormat(Enum):
    """Declared encodings accepted for upload"""
    PNG = "PNG"
    JPEG = "JPEG"

    @classmethod
    def from_subtype(cls, subtype: Optional[str]) -> "ImageFormat":
        """
        Map a content-type subtype (`png`, `jpg`, `jpeg`) to a format.

        Raises:
            ImageError: if the subtype is missing or not supported
        """
        normalized = (subtype or "").strip().lower()
        if normalized == "png":
            return cls.PNG
        if normalized in ("jpg", "jpeg"):
            return cls.JPEG
        raise ImageError(f"Invalid image format: {subtype}")

    def __str__(self) -> str:
        return self.value.lower()


# Mapping of every size class to its PNG-encoded bytes
VariantSet = Dict[SizeClass, bytes]


def storage_key(identity: str, size: SizeClass = SizeClass.ORIGINAL) -> str:
    """
    Build the object key for one variant.

    The original variant has no size suffix, e.g. `img-2IpSsAjuxB8C.png`;
    others get one, e.g. `img-2IpSsAjuxB8C-thumb.png`.
    """
    if size is SizeClass.ORIGINAL:
        return f"{KEY_PREFIX}{identity}.png"
    return f"{KEY_PREFIX}{identity}-{size.tag}.png"
