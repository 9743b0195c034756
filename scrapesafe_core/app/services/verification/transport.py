# app/services/verification/transport.py
"""
DNS and HTTP capabilities consumed by the ownership checks.

The checks only see `resolve_txt()` and `get()`; tests swap in fakes,
production uses dnspython and requests.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

import dns.exception
import dns.resolver
import requests

from scrapesafe_core.config import DNS_LIFETIME_SECONDS, VERIFY_HTTP_TIMEOUT


class TxtRecordNotFound(Exception):
    """NXDOMAIN or NODATA for the queried name."""


class DnsLookupError(Exception):
    """Any other resolver failure (timeout, SERVFAIL, no nameservers)."""


class TxtResolver(Protocol):
    def resolve_txt(self, name: str) -> List[List[str]]:
        ...


class DnsPythonResolver:
    def __init__(self, lifetime: float = DNS_LIFETIME_SECONDS):
        self.lifetime = lifetime

    def resolve_txt(self, name: str) -> List[List[str]]:
        """Each TXT record comes back as its list of character-strings."""
        try:
            resolver = dns.resolver.Resolver()
            resolver.timeout = self.lifetime
            resolver.lifetime = self.lifetime
            answer = resolver.resolve(name, "TXT")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
            raise TxtRecordNotFound(str(e)) from e
        except dns.exception.DNSException as e:
            raise DnsLookupError(str(e) or e.__class__.__name__) from e

        return [
            [s.decode("utf-8", errors="replace") for s in rdata.strings]
            for rdata in answer
        ]


@dataclass
class FetchResponse:
    status_code: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)   # lower-cased names

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def json(self):
        return json.loads(self.text)


class HttpFetcher(Protocol):
    def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: float = VERIFY_HTTP_TIMEOUT) -> FetchResponse:
        ...


class RequestsFetcher:
    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: float = VERIFY_HTTP_TIMEOUT) -> FetchResponse:
        resp = self.session.get(url, headers=headers or {}, timeout=timeout)
        return FetchResponse(
            status_code=resp.status_code,
            text=resp.text,
            headers={k.lower(): v for k, v in resp.headers.items()},
        )
