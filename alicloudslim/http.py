from typing import Optional, Dict, Any
import logging

import requests

logger = logging.getLogger(__name__)


def http_get(
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 15,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """Issue a single GET and return the response; errors propagate to the caller."""
    sender = session if session is not None else requests
    resp = sender.get(url, params=params, headers=headers, timeout=timeout)
    logger.debug("GET %s -> %s", url, resp.status_code)
    return resp


def decode_json(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        logger.warning("Failed to parse JSON from %s (status %s)", resp.url, resp.status_code)
        raise
