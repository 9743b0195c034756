# app/services/verification/dns_check.py
from typing import Optional

from scrapesafe_core.app.services.verification.base import CheckResult, VerificationMethod, token_matches
from scrapesafe_core.app.services.verification.transport import DnsPythonResolver, TxtRecordNotFound, TxtResolver

DNS_RECORD_PREFIX = "_scrapesafe"


def record_name(domain: str) -> str:
    return f"{DNS_RECORD_PREFIX}.{domain}"


class DnsTxtCheck:
    """Looks for the token in a TXT record at _scrapesafe.<domain>."""

    method = VerificationMethod.dns

    def __init__(self, resolver: Optional[TxtResolver] = None):
        self.resolver = resolver or DnsPythonResolver()

    def check(self, domain: str, expected_token: str, expected_owner: Optional[str] = None) -> CheckResult:
        name = record_name(domain)

        try:
            records = self.resolver.resolve_txt(name)
        except TxtRecordNotFound:
            return CheckResult(found=False, valid=False, details=f"No TXT record found at {name}", raw=[])
        except Exception as e:
            return CheckResult(found=False, valid=False, details=f"DNS lookup failed: {e}", raw=[])

        # a long TXT value is split into several character-strings
        flat = ["".join(r) if isinstance(r, (list, tuple)) else str(r) for r in records or []]
        if not flat:
            return CheckResult(found=False, valid=False, details=f"No TXT record found at {name}", raw=[])

        found = any(token_matches(r, expected_token) for r in flat)
        if found:
            details = f"Found valid token in TXT record at {name}"
        else:
            details = f"Token not found. Found records: {', '.join(flat)}"
        return CheckResult(found=found, valid=found, details=details, raw=flat)
