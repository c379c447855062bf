"""Image upload route"""
from fastapi import APIRouter, Depends, Request
from prometheus_client import Counter, Histogram
import time
import logging

from statics.api.auth.dependencies import verify_token
from statics.api.auth.models import TokenPayload
from statics.api.deps import get_uploader
from statics.api.errors import StaticsError
from statics.api.schemas import UploadResponse
from statics.api.services.uploader import ImageUploader

logger = logging.getLogger("statics")

router = APIRouter(prefix="/images", tags=["images"])

UPLOADS = Counter("image_uploads_total", "Image upload requests by outcome", ["outcome"])
LATENCY = Histogram("image_upload_latency_ms", "Image upload latency (ms)", buckets=(50, 100, 200, 400, 800, 1600, 3200, 6400))


@router.post("", response_model=UploadResponse)
async def upload_image(
    request: Request,
    token: TokenPayload = Depends(verify_token),
    uploader: ImageUploader = Depends(get_uploader),
):
    """
    Upload a png / jpeg image sent as the first entry of a multipart body.

    Returns the URL of the original image. Resized variants live next to it:
    `-thumb` (40px), `-small` (80px), `-medium` (320px) and `-large` (640px)
    are inserted before `.png`.
    """
    t0 = time.time()
    logger.debug(f"Received image upload request from user {token.user_id}")
    try:
        body = await request.body()
        logger.debug(f"Read payload bytes ({len(body)})")

        url = await uploader.upload_request(request.method, request.headers, body)
        UPLOADS.labels(outcome="ok").inc()
        return UploadResponse(url=url)
    except StaticsError as e:
        UPLOADS.labels(outcome=e.code).inc()
        logger.warning(f"Image upload failed ({e.code}): {e}")
        raise
    finally:
        LATENCY.observe(max(1.0, (time.time() - t0) * 1000.0))
