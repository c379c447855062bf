"""Health check and metrics routes"""
from fastapi import APIRouter, Response
import asyncio

router = APIRouter(tags=["health"])
METRICS_TIMEOUT_SECONDS = 5.0


@router.get("/healthcheck")
def healthcheck():
    return "Ok"


async def _generate_metrics_async():
    """Render the default registry off the event loop"""
    from prometheus_client import REGISTRY, generate_latest, CONTENT_TYPE_LATEST

    loop = asyncio.get_event_loop()
    metrics_output = await loop.run_in_executor(None, generate_latest, REGISTRY)
    return metrics_output, CONTENT_TYPE_LATEST


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Upload counters and latency in Prometheus text format"""
    try:
        metrics_output, content_type = await asyncio.wait_for(
            _generate_metrics_async(),
            timeout=METRICS_TIMEOUT_SECONDS
        )
        return Response(content=metrics_output, media_type=content_type)
    except asyncio.TimeoutError:
        return Response(content="Metrics generation timed out", status_code=504)
