# app/utils/generator.py
import uuid
from datetime import datetime, timezone

from scrapesafe_core.config import TOKEN_PREFIX


def generate_verification_token(prefix: str = TOKEN_PREFIX) -> str:
    """
    Challenge token handed to a site owner at registration.

    Example: scrapesafe-1b4e28ba-2fa1-41d2-883f-0016d3cca427
    """
    return f"{prefix}-{uuid.uuid4()}"


def iso_timestamp(moment: datetime = None) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix (2024-01-01T00:00:00.000Z)."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
