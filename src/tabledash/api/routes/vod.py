"""Tabledash VOD Proxy Routes.

Forwards requests to the external video-search API so the browser never
talks to it directly. Method, JSON body and query string are passed
through; the upstream status and JSON body are returned unchanged.
"""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tabledash.config import Settings, get_settings
from tabledash.exceptions import ConfigurationException, UpstreamServiceException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vod", tags=["vod"])

_PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def get_vod_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for upstream calls; None means the default network transport."""
    return None


def build_upstream_url(base: str, api_path: str, path: str, query: str) -> str:
    b = (base or "").strip().rstrip("/")
    p = (api_path or "").strip().rstrip("/")
    if p and not p.startswith("/"):
        p = "/" + p
    url = f"{b}{p}"
    if path:
        url = f"{url}/{path.lstrip('/')}"
    if query:
        url = f"{url}?{query}"
    return url


@router.api_route("", methods=_PROXY_METHODS, include_in_schema=False)
@router.api_route("/{path:path}", methods=_PROXY_METHODS)
async def proxy(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    transport: Annotated[httpx.AsyncBaseTransport | None, Depends(get_vod_transport)],
    path: str = "",
) -> JSONResponse:
    """Forward to ``VOD_API_BASE_URL + VOD_API_PATH + /path?query``."""
    request_id = getattr(request.state, "request_id", "unknown")

    if not settings.vod.is_configured:
        logger.error(f"[{request_id}] VOD_PROXY -> missing VOD_API_BASE_URL / VOD_API_PATH")
        raise ConfigurationException("Missing environment variables", setting="VOD_API_BASE_URL")

    url = build_upstream_url(settings.vod.api_base_url, settings.vod.api_path, path, request.url.query)
    content = None
    if request.method != "GET":
        content = await request.body() or None

    logger.info(f"[{request_id}] VOD_PROXY {request.method} -> {url}")
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(settings.vod.timeout_seconds),
            transport=transport,
        ) as client:
            upstream = await client.request(
                request.method,
                url,
                content=content,
                headers={"Content-Type": "application/json"},
            )
    except httpx.HTTPError as e:
        logger.warning(f"[{request_id}] VOD_PROXY -> upstream unreachable: {e}")
        raise UpstreamServiceException("VOD API", str(e) or type(e).__name__) from e

    try:
        data = upstream.json()
    except ValueError as e:
        logger.warning(f"[{request_id}] VOD_PROXY -> non-JSON response status={upstream.status_code}")
        raise UpstreamServiceException("VOD API", "invalid JSON response") from e

    return JSONResponse(status_code=upstream.status_code, content=data)
