"""Cover image lookup and conversion to an inline data URI."""

from __future__ import annotations

import base64
import logging
import mimetypes
from typing import Callable, Iterable, Optional

import httpx

from bookscroll.errors import CoverResolutionError

log = logging.getLogger(__name__)

ResourceReader = Callable[[str], Optional[tuple[bytes, str]]]


def to_data_uri(data: bytes, media_type: str = "") -> str:
    media_type = media_type or "application/octet-stream"
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def _fetch_remote(
    url: str, client: Optional[httpx.Client], timeout: float
) -> tuple[bytes, str]:
    try:
        if client is not None:
            resp = client.get(url, timeout=timeout, follow_redirects=True)
        else:
            resp = httpx.get(url, timeout=timeout, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise CoverResolutionError(f"Cover fetch failed for {url}: {e}") from e
    media_type = resp.headers.get("content-type", "").split(";")[0].strip()
    return resp.content, media_type


def _fetch(
    locator: str,
    read_resource: ResourceReader,
    client: Optional[httpx.Client],
    timeout: float,
) -> Optional[tuple[bytes, str]]:
    if locator.startswith(("http://", "https://")):
        return _fetch_remote(locator, client, timeout)
    return read_resource(locator)


def resolve_cover(
    locators: Iterable[str],
    read_resource: ResourceReader,
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0,
) -> Optional[str]:
    """Return the first usable cover as a data URI, or None.

    Never raises: every failure means "no cover".
    """
    for locator in locators:
        if not locator:
            continue
        try:
            found = _fetch(locator, read_resource, client, timeout)
            if not found or not found[0]:
                continue
            data, media_type = found
            media_type = media_type or mimetypes.guess_type(locator)[0] or ""
            return to_data_uri(data, media_type)
        except Exception as e:
            log.warning("Failed to process cover %s: %s", locator, e)
    return None
