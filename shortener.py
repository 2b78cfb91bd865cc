"""
Shortening helpers: URL normalization, short codes, new link records.
"""

import re
import time
import uuid
import random
import string
from typing import Iterable
from urllib.parse import urlparse, quote

from config import SHORT_CODE_LENGTH
from errors import ValidationError
from models import ShortenedLink, AnnotationResult

INVALID_URL_MESSAGE = "Invalid URL format. Example: google.com"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_FORBIDDEN_HOST_CHARS = set('<>^|\\"{}`')
_BASE36 = string.digits + string.ascii_lowercase
MAX_CODE_ATTEMPTS = 20


def normalize_url(raw: str) -> str:
    """Trim, add https:// when no http(s) scheme is given, then validate."""
    url = (raw or "").strip()
    if not url:
        raise ValidationError(INVALID_URL_MESSAGE)
    if not _SCHEME_RE.match(url):
        url = "https://" + url

    if any(c.isspace() for c in url):
        raise ValidationError(INVALID_URL_MESSAGE)
    try:
        url.encode("utf-8")
        parsed = urlparse(url)
        host = parsed.hostname
        parsed.port
    except ValueError as e:
        raise ValidationError(INVALID_URL_MESSAGE) from e
    if not host or _FORBIDDEN_HOST_CHARS.intersection(host):
        raise ValidationError(INVALID_URL_MESSAGE)
    return url


def _base36_fraction(value: float, digits: int) -> str:
    """First `digits` base-36 digits after the point of a value in [0, 1)."""
    out = []
    for _ in range(digits):
        value *= 36
        digit = int(value)
        out.append(_BASE36[digit])
        value -= digit
    return "".join(out)


def generate_short_code(existing: Iterable[str] = (), length: int = SHORT_CODE_LENGTH) -> str:
    """
    Random lowercase alphanumeric code, resampled while it clashes with
    `existing`. After MAX_CODE_ATTEMPTS the last sample is returned as is.
    """
    taken = set(existing)
    code = _base36_fraction(random.random(), length)
    attempts = 1
    while code in taken and attempts < MAX_CODE_ATTEMPTS:
        code = _base36_fraction(random.random(), length)
        attempts += 1
    if code in taken:
        print(f"[Shortener] Could not find a free short code after {attempts} attempts, reusing {code}")
    return code


def new_link(url: str, annotation: AnnotationResult,
             existing_codes: Iterable[str] = ()) -> ShortenedLink:
    """Build a fresh record for an already-normalized URL."""
    return ShortenedLink(
        id=str(uuid.uuid4()),
        original_url=url,
        short_code=generate_short_code(existing_codes),
        created_at=int(time.time() * 1000),
        clicks=0,
        tags=list(annotation.tags),
        ai_summary=annotation.summary,
        category=annotation.category,
    )


def build_short_url(origin: str, short_code: str) -> str:
    """The working short link: <origin>?u=<shortCode>."""
    return f"{origin.rstrip('/')}?u={quote(short_code, safe='')}"
