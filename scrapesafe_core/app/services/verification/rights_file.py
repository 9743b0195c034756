# app/services/verification/rights_file.py
"""
Signed rights file: https://<domain>/.well-known/scrapesafe.json

    {"domain": ..., "owner": ..., "token": ..., "timestamp": ..., "signature": "0x..."}

`signature` is the owner's personal_sign over canonical(payload minus
"signature"). A valid file proves control of the owner key as well as
of the web root, so this is the strongest of the three checks.
"""

from typing import Any, Callable, Dict, Optional

from scrapesafe_core.config import VERIFY_HTTP_TIMEOUT, VERIFIER_USER_AGENT
from scrapesafe_core.app.services.verification.base import CheckResult, VerificationMethod
from scrapesafe_core.app.services.verification.transport import HttpFetcher, RequestsFetcher
from scrapesafe_core.app.utils.generator import iso_timestamp
from scrapesafe_core.app.utils.signer import SignatureCheck, verify_owner_signature

RIGHTS_FILE_PATH = "/.well-known/scrapesafe.json"
REQUIRED_FIELDS = ("domain", "owner", "token", "signature")


def rights_file_url(domain: str) -> str:
    return f"https://{domain}{RIGHTS_FILE_PATH}"


def _invalid(details: str, payload: Dict[str, Any]) -> CheckResult:
    return CheckResult(found=True, valid=False, details=details, raw=payload)


class RightsFileCheck:
    method = VerificationMethod.file

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        verify: Callable[[Any, str, str], SignatureCheck] = verify_owner_signature,
        timeout: float = VERIFY_HTTP_TIMEOUT,
    ):
        self.fetcher = fetcher or RequestsFetcher()
        self.verify = verify
        self.timeout = timeout

    def check(self, domain: str, expected_token: str, expected_owner: Optional[str] = None) -> CheckResult:
        url = rights_file_url(domain)
        headers = {"User-Agent": VERIFIER_USER_AGENT, "Accept": "application/json"}

        try:
            response = self.fetcher.get(url, headers=headers, timeout=self.timeout)
            if not response.ok:
                return CheckResult(found=False, valid=False, details=f"Failed to fetch {url}: HTTP {response.status_code}")

            content_type = response.content_type
            if "application/json" not in content_type and "text/" not in content_type:
                return CheckResult(
                    found=False,
                    valid=False,
                    details=f"Invalid content type: {content_type}. Expected application/json",
                )

            payload = response.json()
        except Exception as e:
            return CheckResult(found=False, valid=False, details=f"Failed to fetch or parse rights file: {e}")

        if not isinstance(payload, dict):
            return CheckResult(found=False, valid=False, details="Failed to fetch or parse rights file: not a JSON object")

        if any(not payload.get(f) or not isinstance(payload.get(f), str) for f in REQUIRED_FIELDS):
            return _invalid("Rights file missing required fields (domain, owner, token, signature)", payload)

        if payload["domain"] != domain:
            return _invalid(f"Domain mismatch. Expected: {domain}, Got: {payload['domain']}", payload)

        if payload["token"] != expected_token:
            return _invalid(f"Token mismatch. Expected: {expected_token}, Got: {payload['token']}", payload)

        if not expected_owner or payload["owner"].lower() != expected_owner.lower():
            return _invalid(f"Owner mismatch. Expected: {expected_owner}, Got: {payload['owner']}", payload)

        signed_part = {k: v for k, v in payload.items() if k != "signature"}
        verification = self.verify(signed_part, payload["signature"], expected_owner)
        if not verification.valid:
            return _invalid(f"Invalid signature. Recovered signer: {verification.signer or 'none'}", payload)

        return CheckResult(found=True, valid=True, details="Valid rights file with verified owner signature", raw=payload)


def build_rights_file_template(domain: str, owner: str, token: str, timestamp: Optional[str] = None) -> Dict[str, Any]:
    """Unsigned payload plus hosting instructions for the site owner."""
    payload = {
        "domain": domain,
        "owner": owner,
        "token": token,
        "timestamp": timestamp or iso_timestamp(),
    }

    instructions = "\n".join([
        "To verify your site using the file method:",
        "",
        f"1. Sign the canonical (key-sorted, compact) JSON of this payload with your wallet ({owner}) using personal_sign.",
        "2. Add the resulting hex string as a \"signature\" field to the JSON.",
        f"3. Host the complete JSON at {rights_file_url(domain)} with Content-Type application/json.",
    ])

    return {"payload": payload, "instructions": instructions}
