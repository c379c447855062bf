import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from fastapi import Depends

from statics.api.config import get_settings
from statics.api.services.image_storage import ImageStorage
from statics.api.services.local_file_storage import LocalFileStorage
from statics.api.services.preprocessor import ImagePreprocessor
from statics.api.services.random_hash import RandomHashGenerator
from statics.api.services.uploader import ImageUploader

logger = logging.getLogger(__name__)

_image_storage = None
_resize_pool: Optional[ThreadPoolExecutor] = None


def get_resize_pool() -> ThreadPoolExecutor:
    global _resize_pool
    if _resize_pool is None:
        workers = get_settings().resize_workers
        _resize_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resize")
        logger.info(f"Started resize pool with {workers} workers")
    return _resize_pool


def shutdown_resize_pool() -> None:
    global _resize_pool
    if _resize_pool is not None:
        _resize_pool.shutdown(wait=True)
        _resize_pool = None


def get_image_storage() -> ImageStorage:
    global _image_storage
    if _image_storage is None:
        settings = get_settings()
        backend = settings.storage_backend

        if backend == "local":
            _image_storage = LocalFileStorage(
                base_path=settings.image_storage_path,
                base_url=settings.base_url,
            )
            logger.info(f"Using local file storage: {settings.image_storage_path}")

        elif backend in ["s3", "minio"]:
            from statics.api.services.s3_storage import S3Storage

            endpoint_url = settings.s3_endpoint_url
            access_key = settings.s3_access_key_id
            secret_key = settings.s3_secret_access_key

            # MinIO-specific defaults
            if backend == "minio":
                endpoint_url = endpoint_url or "http://localhost:9000"
                access_key = access_key or "minioadmin"
                secret_key = secret_key or "minioadmin"
                logger.info(f"Using MinIO storage: {endpoint_url}/{settings.s3_bucket_name}")
            else:
                logger.info(f"Using S3 storage: {settings.s3_bucket_name} (region: {settings.s3_region})")

            _image_storage = S3Storage(
                bucket_name=settings.s3_bucket_name,
                endpoint_url=endpoint_url,
                access_key_id=access_key,
                secret_access_key=secret_key,
                region_name=settings.s3_region,
                public_url_base=settings.s3_public_url_base,
            )
        else:
            raise ValueError(f"Unsupported storage backend: {backend}")

    return _image_storage


def get_preprocessor() -> ImagePreprocessor:
    return ImagePreprocessor(executor=get_resize_pool())


def get_uploader(
    storage: ImageStorage = Depends(get_image_storage),
    preprocessor: ImagePreprocessor = Depends(get_preprocessor),
) -> ImageUploader:
    """Per-request orchestrator over the process-wide storage and pool"""
    return ImageUploader(
        storage=storage,
        preprocessor=preprocessor,
        random=RandomHashGenerator(),
    )
