"""
Retry/backoff and rate-limit-aware HTTP POST helper for the GitHub GraphQL endpoint.
This module centralizes request retry logic so the GitHub client stays a thin query layer.
"""

import os
import time
import random
import email.utils
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
import requests

from errors import FetchFailed

# retry/backoff defaults from environment
DEFAULT_MAX_RETRIES = int(os.getenv("PRFLOW_MAX_RETRIES", "3"))
DEFAULT_BACKOFF_BASE = float(os.getenv("PRFLOW_BACKOFF_BASE", "0.5"))
_env_jitter = os.getenv("PRFLOW_BACKOFF_JITTER")
DEFAULT_BACKOFF_JITTER = float(_env_jitter) if _env_jitter is not None and _env_jitter != "" else None
DEFAULT_MAX_BACKOFF = float(os.getenv("PRFLOW_MAX_BACKOFF", "120.0"))

RETRY_STATUSES = (429, 502, 503, 504)

# runtime-overrides
_runtime_max_retries: Optional[int] = None
_runtime_backoff_base: Optional[float] = None
_runtime_backoff_jitter: Optional[float] = None
_runtime_max_backoff: Optional[float] = None


def configure_retry(
    max_retries: Optional[int] = None, backoff_base: Optional[float] = None, backoff_jitter: Optional[float] = None, max_backoff: Optional[float] = None
):
    """Configure retry/backoff defaults at runtime (e.g. from CLI)."""
    global _runtime_max_retries, _runtime_backoff_base, _runtime_backoff_jitter, _runtime_max_backoff
    if max_retries is not None:
        _runtime_max_retries = int(max_retries)
    if backoff_base is not None:
        _runtime_backoff_base = float(backoff_base)
    if backoff_jitter is not None:
        _runtime_backoff_jitter = float(backoff_jitter)
    if max_backoff is not None:
        _runtime_max_backoff = float(max_backoff)


def reset_retry():
    """Drop runtime overrides and fall back to the environment defaults."""
    global _runtime_max_retries, _runtime_backoff_base, _runtime_backoff_jitter, _runtime_max_backoff
    _runtime_max_retries = None
    _runtime_backoff_base = None
    _runtime_backoff_jitter = None
    _runtime_max_backoff = None


def _parse_retry_after(raw_ra: Optional[str]) -> Optional[float]:
    if not raw_ra:
        return None
    try:
        return float(raw_ra)
    except ValueError:
        pass
    try:
        dt = email.utils.parsedate_to_datetime(raw_ra)
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return max(0.0, (dt - datetime.now(timezone.utc)).total_seconds())


def _header_float(headers, key: str) -> Optional[float]:
    val = headers.get(key)
    if val is None:
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _resolve_backoff_params() -> Tuple[int, float, float, float]:
    max_retries = _runtime_max_retries if _runtime_max_retries is not None else DEFAULT_MAX_RETRIES
    base = _runtime_backoff_base if _runtime_backoff_base is not None else DEFAULT_BACKOFF_BASE

    if _runtime_backoff_jitter is not None:
        jitter = _runtime_backoff_jitter
    elif DEFAULT_BACKOFF_JITTER is not None:
        jitter = DEFAULT_BACKOFF_JITTER
    else:
        jitter = base

    max_backoff = _runtime_max_backoff if _runtime_max_backoff is not None else DEFAULT_MAX_BACKOFF
    return max(1, int(max_retries)), float(base), float(jitter), float(max_backoff)


def _is_secondary_rate_limit(resp) -> bool:
    if resp.status_code != 403:
        return False
    if _header_float(resp.headers, 'Retry-After') is not None:
        return True
    remaining = _header_float(resp.headers, 'X-RateLimit-Remaining')
    if remaining is not None and remaining <= 0:
        return True
    return 'rate limit' in (getattr(resp, 'text', '') or '').lower()


def _should_retry_response(resp) -> bool:
    return resp.status_code in RETRY_STATUSES or _is_secondary_rate_limit(resp)


def _compute_wait_seconds(resp, backoff: float, jitter: float, max_backoff: float) -> float:
    headers = getattr(resp, 'headers', None) or {}
    ra = _parse_retry_after(headers.get('Retry-After'))
    if ra is not None:
        return min(ra + random.uniform(0, jitter), max_backoff)
    reset = _header_float(headers, 'X-RateLimit-Reset')
    if reset:
        wait = max(0.0, reset - time.time())
        return min(wait + random.uniform(0, jitter), max_backoff)
    return min(backoff + random.uniform(0, jitter), max_backoff)


def post_with_retries(url: str, headers: Dict[str, str], body: Dict[str, Any], timeout: float = 30.0):
    """POST a JSON body, retrying transient failures with exponential backoff.

    Returns the final requests.Response (which may still be a non-200 the caller must judge).
    Raises FetchFailed when every attempt failed at the network level.
    """
    max_retries, base, jitter, max_backoff = _resolve_backoff_params()
    backoff = base
    last_error: Optional[Exception] = None

    for attempt in range(max_retries):
        try:
            resp = requests.post(url, headers=headers, json=body, timeout=timeout)
        except requests.RequestException as ex:
            last_error = ex
            if attempt + 1 < max_retries:
                time.sleep(min(backoff + random.uniform(0, jitter), max_backoff))
                backoff = min(backoff * 2, max_backoff)
            continue

        if resp.status_code == 200 or not _should_retry_response(resp):
            return resp
        if attempt + 1 == max_retries:
            return resp
        time.sleep(_compute_wait_seconds(resp, backoff, jitter, max_backoff))
        backoff = min(backoff * 2, max_backoff)

    raise FetchFailed(f"request to {url} failed after {max_retries} attempt(s): {last_error}")


__all__ = ["configure_retry", "reset_retry", "post_with_retries"]
