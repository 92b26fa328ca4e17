from __future__ import annotations

"""Lightweight HTTP client util for the OAuth provider.

Uses stdlib urllib to avoid an extra HTTP dependency. Every call carries an
explicit timeout. GETs may retry on transport errors; 4xx/5xx responses are
raised immediately with their status code so callers can tell a rejected
token (401) from an outage.
"""
import json
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Mapping, Optional


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _read_json(req: urllib.request.Request, timeout: float) -> Dict[str, Any]:
    with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
        data = resp.read()
        return json.loads(data.decode("utf-8"))


def get_json(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
    retries: int = 0,
    backoff: float = 0.5,
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        req = urllib.request.Request(url, headers=dict(headers or {}), method="GET")
        try:
            return _read_json(req, timeout)
        except urllib.error.HTTPError as e:
            raise HttpError(f"HTTP {e.code} for {url}", status=e.code) from e
        except (urllib.error.URLError, TimeoutError, ValueError) as e:
            # ValueError for JSON decode
            last_err = e
            if attempt == retries:
                break
            time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")


def post_form(
    url: str, data: Mapping[str, str], *, timeout: float = 5.0
) -> Dict[str, Any]:
    body = urllib.parse.urlencode(dict(data)).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=body,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        method="POST",
    )
    try:
        return _read_json(req, timeout)
    except urllib.error.HTTPError as e:
        raise HttpError(f"HTTP {e.code} for {url}", status=e.code) from e
    except (urllib.error.URLError, TimeoutError, ValueError) as e:
        raise HttpError(f"Failed to post to {url}: {e}") from e
