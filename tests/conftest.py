"""
Shared fixtures: RS256 keys, tokens, test images, multipart bodies and
an in-memory storage backend.
"""
import dataclasses
import io
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt
from PIL import Image

from statics.api.config import Settings
from statics.api.errors import NetworkError
from statics.api.services.image_storage import ImageStorage

BOUNDARY = "---------------------------2132006148186267924133397521"


class InMemoryStorage(ImageStorage):
    """Storage keeping objects in a dict; writes to `fail_suffix` keys fail"""

    def __init__(self, fail_suffix: Optional[str] = None):
        self.objects = {}
        self.fail_suffix = fail_suffix

    async def put_object(self, key: str, content_type: str, data: bytes) -> None:
        if self.fail_suffix and key.endswith(self.fail_suffix):
            raise NetworkError(f"Failed to upload {key}: connection reset")
        self.objects[key] = (content_type, data)

    def get_public_url(self, key: str) -> str:
        return f"https://s3.amazonaws.com/statics-test/{key}"

    def get_by_url(self, url: str) -> bytes:
        key = url.rsplit("/", 1)[-1]
        return self.objects[key][1]


@pytest.fixture(scope="session")
def rsa_keys():
    """(private PEM, public PEM) pair for signing test tokens"""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def settings(rsa_keys):
    return dataclasses.replace(Settings(), jwt_public_key=rsa_keys[1])


@pytest.fixture
def make_token(rsa_keys):
    def _make(user_id: int = 3, expires_in: int = 3600, private_key: Optional[str] = None) -> str:
        payload = {"user_id": user_id, "exp": int(time.time()) + expires_in}
        return jwt.encode(payload, private_key or rsa_keys[0], algorithm="RS256")
    return _make


@pytest.fixture
def make_image():
    """Encode a gradient test image"""
    def _make(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
        img = Image.linear_gradient("L").resize((width, height)).convert(mode)
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()
    return _make


@pytest.fixture
def multipart_body():
    """Build a multipart/form-data body with a single file entry"""
    def _make(data: bytes, content_type: Optional[str] = "image/png", filename: str = "image-328x228.png",
              boundary: str = BOUNDARY) -> bytes:
        lines = [
            f"--{boundary}".encode(),
            f'Content-Disposition: form-data; name="file"; filename="{filename}"'.encode(),
        ]
        if content_type is not None:
            lines.append(f"Content-Type: {content_type}".encode())
        head = b"\r\n".join(lines) + b"\r\n\r\n"
        return head + data + f"\r\n--{boundary}--\r\n".encode()
    return _make


@pytest.fixture
def multipart_headers():
    return {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def failing_storage():
    """Storage whose medium variant write always fails"""
    return InMemoryStorage(fail_suffix="-medium.png")


@pytest.fixture
def resize_pool():
    pool = ThreadPoolExecutor(max_workers=4)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def decode():
    """Open encoded bytes as a PIL image"""
    return lambda data: Image.open(io.BytesIO(data))
