# app/services/verification/meta_check.py
import re
from typing import Optional

from scrapesafe_core.config import VERIFY_HTTP_TIMEOUT, VERIFIER_USER_AGENT
from scrapesafe_core.app.services.verification.base import CheckResult, VerificationMethod, token_matches
from scrapesafe_core.app.services.verification.transport import HttpFetcher, RequestsFetcher

# name before content, or content before name
_NAME_FIRST = re.compile(r"""<meta\s+[^>]*name=["']scrapesafe["'][^>]*content=["']([^"']+)["'][^>]*>""", re.IGNORECASE)
_CONTENT_FIRST = re.compile(r"""<meta\s+[^>]*content=["']([^"']+)["'][^>]*name=["']scrapesafe["'][^>]*>""", re.IGNORECASE)


def find_meta_token(html: str) -> Optional[str]:
    match = _NAME_FIRST.search(html) or _CONTENT_FIRST.search(html)
    return match.group(1) if match else None


class MetaTagCheck:
    """Looks for <meta name="scrapesafe" content="<token>"> on the site's home page."""

    method = VerificationMethod.meta

    def __init__(self, fetcher: Optional[HttpFetcher] = None, timeout: float = VERIFY_HTTP_TIMEOUT):
        self.fetcher = fetcher or RequestsFetcher()
        self.timeout = timeout

    def check(self, domain: str, expected_token: str, expected_owner: Optional[str] = None) -> CheckResult:
        url = f"https://{domain}"

        try:
            response = self.fetcher.get(url, headers={"User-Agent": VERIFIER_USER_AGENT}, timeout=self.timeout)
        except Exception as e:
            return CheckResult(found=False, valid=False, details=f"Failed to fetch or parse {url}: {e}")

        if not response.ok:
            return CheckResult(found=False, valid=False, details=f"Failed to fetch {url}: HTTP {response.status_code}")

        content = find_meta_token(response.text or "")
        if content is None:
            return CheckResult(found=False, valid=False, details='No <meta name="scrapesafe"> tag found in page head')

        found = token_matches(content, expected_token)
        if found:
            details = "Found valid scrapesafe meta tag"
        else:
            details = f"Meta tag found but token mismatch. Expected: {expected_token}, Got: {content}"
        return CheckResult(found=found, valid=found, details=details, raw=content)
