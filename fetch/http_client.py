import httpx
import logging
from typing import Optional, Dict

# Default timeout configuration (in seconds)
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 5.0

# Realistic desktop browser headers; some sites serve stripped pages to bots
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


async def fetch_url(
    url: str,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
):
    """
    GET a page following redirects, bounded by a total timeout.

    Args:
        url: The URL to fetch
        timeout: Total request timeout in seconds (default: 10s)
        connect_timeout: Connection timeout in seconds (default: 5s, never above timeout)
        headers: Extra headers merged over DEFAULT_HEADERS

    Returns:
        httpx.Response object. Status codes are not checked here.

    Raises:
        httpx.TimeoutException, httpx.RequestError
    """
    logger = logging.getLogger(__name__)
    total = timeout or DEFAULT_TIMEOUT
    logger.debug(f"HTTP GET {url} (timeout: {total}s)")

    timeout_config = httpx.Timeout(
        timeout=total,
        connect=min(connect_timeout or DEFAULT_CONNECT_TIMEOUT, total)
    )
    request_headers = {**DEFAULT_HEADERS, **(headers or {})}

    try:
        async with httpx.AsyncClient(timeout=timeout_config, follow_redirects=True) as client:
            response = await client.get(url, headers=request_headers)
            logger.debug(f"HTTP {response.status_code} {url} ({len(response.text)} bytes)")
            return response
    except httpx.TimeoutException as e:
        logger.warning(f"HTTP timeout for {url}: {e}")
        raise
    except httpx.RequestError as e:
        logger.warning(f"HTTP request error for {url}: {e}")
        raise
