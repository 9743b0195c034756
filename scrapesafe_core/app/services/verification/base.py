# app/services/verification/base.py
import enum
from dataclasses import dataclass
from typing import Any, Optional

from scrapesafe_core.app.errors import InvalidInputError

DEV_TEST_METHOD = "dev-test"


class VerificationMethod(str, enum.Enum):
    dns = "dns"
    meta = "meta"
    file = "file"

    @classmethod
    def parse(cls, value: Any) -> "VerificationMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError("method must be one of: dns, meta, file")


@dataclass
class CheckResult:
    """
    Outcome of one ownership check.

    found: some candidate evidence was located
    valid: the evidence proves ownership (equals `found` for dns/meta)
    details: human readable reason, always set
    raw: whatever was retrieved (records, meta content, rights payload)
    """
    found: bool
    valid: bool
    details: str
    raw: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.found and self.valid

    def to_dict(self):
        return {"found": self.found, "valid": self.valid, "details": self.details, "raw": self.raw}


def token_matches(candidate: Optional[str], expected_token: str) -> bool:
    """Exact match or containment, e.g. "scrapesafe-abc" inside "v=1; scrapesafe-abc"."""
    if not candidate or not expected_token:
        return False
    return candidate == expected_token or expected_token in candidate
