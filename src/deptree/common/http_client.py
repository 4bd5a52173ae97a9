"""Shared async HTTP helpers used by the registry client.

Encapsulates request/timeout/retry handling so callers only see a
``(status_code, headers, payload)`` tuple and never an exception.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ..constants import Constants
from .logging_utils import Timer, extra_context, is_debug_enabled, redact_text, safe_url

logger = logging.getLogger(__name__)


def build_timeout(seconds: Optional[float] = None) -> aiohttp.ClientTimeout:
    """Return the per-request timeout applied to every registry call."""
    return aiohttp.ClientTimeout(total=seconds if seconds is not None else Constants.REQUEST_TIMEOUT)


def create_session(timeout: Optional[float] = None) -> aiohttp.ClientSession:
    """Create a client session with the project's defaults."""
    connector = aiohttp.TCPConnector(limit=Constants.PACKUMENT_FETCH_CONCURRENCY * 2)
    return aiohttp.ClientSession(
        timeout=build_timeout(timeout),
        connector=connector,
        headers={"User-Agent": Constants.USER_AGENT},
    )


async def robust_get(
    session: aiohttp.ClientSession,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET with retries on timeouts, connection errors and 5xx.

    Returns:
        Tuple of (status_code, headers_dict, body_text). A status code of 0
        means every attempt failed before a response was received.
    """
    safe_target = safe_url(url)
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            await asyncio.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))

        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1,
                        ),
                    )
                async with session.get(url, headers=headers) as response:
                    text = await response.text()
                    status = response.status
                    response_headers = dict(response.headers)
            except asyncio.TimeoutError:
                last_exception = "timeout"
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP timeout",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="timeout",
                            attempt=attempt + 1,
                            target=safe_target,
                        ),
                    )
                continue
            except aiohttp.ClientError as exc:
                last_exception = redact_text(str(exc))
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target,
                        ),
                    )
                continue

        if status >= 500:
            last_exception = f"HTTP {status}"
            continue

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if status < 400 else "client_error",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                ),
            )
        return status, response_headers, text

    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"


async def get_json(
    session: aiohttp.ClientSession,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET and parse a JSON body.

    Args:
        session: Open client session.
        url: Target URL.
        headers: Optional request headers.

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = await robust_get(session, url, headers=headers)

    if status_code == 200 and text:
        try:
            return status_code, response_headers, json.loads(text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url),
                    ),
                )
            return status_code, response_headers, None

    return status_code, response_headers, None
