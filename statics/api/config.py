"""Service configuration read from environment variables"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Settings:
    storage_backend: str = "s3"

    # S3-compatible storage
    s3_bucket_name: str = "statics"
    s3_endpoint_url: Optional[str] = None
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    s3_region: str = "us-east-1"
    s3_public_url_base: Optional[str] = None

    # Local filesystem storage
    image_storage_path: str = "./storage/images"
    base_url: str = "http://localhost:8000/static"

    # Bearer token verification (RS256)
    jwt_public_key: Optional[str] = None
    jwt_public_key_path: Optional[str] = None
    jwt_leeway: int = 0

    resize_workers: int = os.cpu_count() or 1
    cors_allow_origin: str = "*"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            storage_backend=os.getenv("IMAGE_STORAGE_BACKEND", "s3").lower(),
            s3_bucket_name=os.getenv("S3_BUCKET_NAME", "statics"),
            s3_endpoint_url=os.getenv("S3_ENDPOINT_URL"),
            s3_access_key_id=os.getenv("S3_ACCESS_KEY_ID"),
            s3_secret_access_key=os.getenv("S3_SECRET_ACCESS_KEY"),
            s3_region=os.getenv("S3_REGION", "us-east-1"),
            s3_public_url_base=os.getenv("S3_PUBLIC_URL_BASE"),
            image_storage_path=os.getenv("IMAGE_STORAGE_PATH", "./storage/images"),
            base_url=os.getenv("BASE_URL", "http://localhost:8000/static"),
            jwt_public_key=os.getenv("JWT_PUBLIC_KEY"),
            jwt_public_key_path=os.getenv("JWT_PUBLIC_KEY_PATH"),
            jwt_leeway=int(os.getenv("JWT_LEEWAY", "0")),
            resize_workers=int(os.getenv("RESIZE_WORKERS", str(os.cpu_count() or 1))),
            cors_allow_origin=os.getenv("CORS_ALLOW_ORIGIN", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def load_jwt_public_key(self) -> str:
        """
        PEM public key used to verify bearer tokens.

        Raises:
            RuntimeError: if neither JWT_PUBLIC_KEY nor JWT_PUBLIC_KEY_PATH is set
        """
        if self.jwt_public_key:
            return self.jwt_public_key
        if self.jwt_public_key_path:
            return Path(self.jwt_public_key_path).read_text()
        raise RuntimeError("JWT_PUBLIC_KEY or JWT_PUBLIC_KEY_PATH not configured")


_settings = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
