from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

import httpx

from fantasy_forecast.errors import ProviderError

TIMEOUT_ENV = "FANTASY_FORECAST_HTTP_TIMEOUT"
DEFAULT_TIMEOUT_SECONDS = 20.0

logger = logging.getLogger(__name__)


def http_timeout() -> float:
    raw = os.getenv(TIMEOUT_ENV)
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", TIMEOUT_ENV, raw)
        return DEFAULT_TIMEOUT_SECONDS


async def get_json(url: str, *, params: Optional[Mapping[str, Any]] = None) -> Any:
    """GET ``url`` and decode the JSON body.

    Transport errors, non-2xx statuses and undecodable bodies all surface as
    ``ProviderError``.
    """
    logger.debug("GET %s params=%s", url, params)
    try:
        async with httpx.AsyncClient(timeout=http_timeout(), follow_redirects=True) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPError as exc:
        raise ProviderError(f"Request to {url} failed: {exc}") from exc
    except ValueError as exc:
        raise ProviderError(f"Malformed JSON from {url}") from exc
