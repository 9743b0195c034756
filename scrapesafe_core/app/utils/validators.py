# app/utils/validators.py
import re
from typing import Any

from scrapesafe_core.app.errors import InvalidInputError

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def is_valid_address(value: Any) -> bool:
    return isinstance(value, str) and bool(ADDRESS_RE.match(value))


def require_address(value: Any, field: str = "address") -> str:
    if not value or not isinstance(value, str):
        raise InvalidInputError(f"{field} is required and must be a string")
    if not ADDRESS_RE.match(value):
        raise InvalidInputError(f"Invalid {field} format")
    return value


def normalize_domain(domain: Any) -> str:
    """
    "HTTPS://Example.com/" -> "example.com"

    Lower-cases, drops an http(s) scheme and trailing slashes.
    """
    if not domain or not isinstance(domain, str):
        raise InvalidInputError("domain is required and must be a string")
    normalized = _SCHEME_RE.sub("", domain.strip().lower()).rstrip("/").strip()
    if not normalized:
        raise InvalidInputError("domain is required and must be a string")
    return normalized
