"""
Normalization utility helpers.
Small helpers to pull typed values out of raw GraphQL payloads.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from errors import InvalidTimestamp, MissingField


def dig(raw: Any, *path: str) -> Any:
    """Follow nested keys and return None as soon as a link is null or absent."""
    current = raw
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def require(raw: Dict[str, Any], *path: str) -> Any:
    """Like dig(), but a missing value is a MissingField error naming the dotted path."""
    value = dig(raw, *path)
    if value is None:
        raise MissingField('.'.join(path))
    return value


def require_int(raw: Dict[str, Any], *path: str) -> int:
    value = require(raw, *path)
    # bool is an int subclass; a boolean count is a schema mismatch, not a number
    if isinstance(value, bool) or not isinstance(value, int):
        raise MissingField('.'.join(path))
    return value


_TIMESTAMP_RE = re.compile(
    r'^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})'
    r'(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})?$'
)


def parse_timestamp(value: Any, field: str = 'timestamp') -> datetime:
    """Parse an RFC 3339 date-time into an aware datetime. Naive values are taken as UTC.

    Date-only and other partial values raise InvalidTimestamp on every Python version.
    """
    if not isinstance(value, str):
        raise InvalidTimestamp(value, field)
    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        raise InvalidTimestamp(value, field)
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    fraction = (match.group('fraction') or '')[:6].ljust(6, '0')
    offset = match.group('offset') or ''
    if offset in ('Z', 'z'):
        offset = '+00:00'
    raw = f"{match.group('date')}T{match.group('time')}.{fraction}{offset}"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidTimestamp(value, field) from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def optional_login(raw: Dict[str, Any], *path: str) -> Optional[str]:
    login = dig(raw, *path)
    return login if isinstance(login, str) and login else None
