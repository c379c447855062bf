"""
S3-compatible storage implementation.
Works with AWS S3, Cloudflare R2, MinIO, and other S3-compatible services.
"""
import asyncio
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from statics.api.errors import NetworkError
from statics.api.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://s3.amazonaws.com"


class S3Storage(ImageStorage):
    """S3-compatible storage writing public-read objects"""

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region_name: str = "us-east-1",
        public_url_base: Optional[str] = None,
    ):
        """
        Initialize S3-compatible storage.

        Args:
            bucket_name: S3 bucket name
            endpoint_url: S3 endpoint (None for AWS, custom for MinIO/R2)
            access_key_id: AWS/S3 access key
            secret_access_key: AWS/S3 secret key
            region_name: AWS region or 'auto' for R2
            public_url_base: Base URL objects are served from (bucket URL when unset)
        """
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.public_url_base = public_url_base.rstrip("/") if public_url_base else None

        self.s3_client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
            config=boto3.session.Config(signature_version="s3v4"),
        )

    async def put_object(self, key: str, content_type: str, data: bytes) -> None:
        """Upload `data` with a public-read ACL"""
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                    ACL="public-read",
                ),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {key} to bucket {self.bucket_name}: {e}")
            raise NetworkError(f"Failed to upload {key}: {e}") from e

    def get_public_url(self, key: str) -> str:
        if self.public_url_base:
            return f"{self.public_url_base}/{key}"
        endpoint = (self.endpoint_url or DEFAULT_ENDPOINT).rstrip("/")
        return f"{endpoint}/{self.bucket_name}/{key}"
