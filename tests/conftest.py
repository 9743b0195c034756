# tests/conftest.py
"""Shared fixtures: in-memory database, fake DNS/HTTP, test wallets."""

import json

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scrapesafe_core.config import Base
from scrapesafe_core.app import models  # noqa: F401
from scrapesafe_core.app.api.deps import get_db
from scrapesafe_core.app.main import create_app
from scrapesafe_core.app.services.cache import InMemoryCache, LicenseCheckCache
from scrapesafe_core.app.services.container import ServiceContainer
from scrapesafe_core.app.services.ipfs import PinningService
from scrapesafe_core.app.services.story import StoryIpRegistrar
from scrapesafe_core.app.services.verification.transport import FetchResponse, TxtRecordNotFound
from scrapesafe_core.app.utils.canonical import canonical
from scrapesafe_core.app.utils.signer import ServerSigner

# Hardhat / anvil well-known development keys
SERVER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SERVER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OWNER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OWNER_ADDRESS = Account.from_key(OWNER_KEY).address
BUYER_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
BUYER_ADDRESS = Account.from_key(BUYER_KEY).address


def personal_sign(private_key: str, payload) -> str:
    signed = Account.sign_message(encode_defunct(text=canonical(payload)), private_key=private_key)
    return "0x" + bytes(signed.signature).hex()


# -------------------------
# Fakes
# -------------------------
class FakeResolver:
    """TXT records by name; unknown names behave like NXDOMAIN."""

    def __init__(self, records=None, error=None):
        self.records = records or {}
        self.error = error
        self.queries = []

    def resolve_txt(self, name):
        self.queries.append(name)
        if self.error is not None:
            raise self.error
        if name not in self.records:
            raise TxtRecordNotFound(name)
        return self.records[name]


class FakeFetcher:
    """Canned responses by URL; an Exception value is raised instead."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def get(self, url, headers=None, timeout=10):
        self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
        resp = self.responses.get(url)
        if resp is None:
            return FetchResponse(status_code=404, text="Not Found", headers={"content-type": "text/html"})
        if isinstance(resp, Exception):
            raise resp
        return resp


def json_response(data, status_code=200, content_type="application/json"):
    return FetchResponse(status_code=status_code, text=json.dumps(data), headers={"content-type": content_type})


def html_response(html, status_code=200):
    return FetchResponse(status_code=status_code, text=html, headers={"content-type": "text/html; charset=utf-8"})


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeHttpResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self._data = data or {}

    def json(self):
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")


class FakeSession:
    """Stands in for requests.Session in the pinning / IP registration clients."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, **kwargs):
        self.posts.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


# -------------------------
# Fixtures
# -------------------------
@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def signer():
    return ServerSigner(private_key=SERVER_KEY)


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def license_cache(clock):
    return LicenseCheckCache(InMemoryCache(clock=clock), ttl_seconds=60)


@pytest.fixture
def container(signer, resolver, fetcher, license_cache, session_factory):
    return ServiceContainer(
        signer=signer,
        resolver=resolver,
        fetcher=fetcher,
        ip_registrar=StoryIpRegistrar(sdk_key=None),
        pinning=PinningService(token=None),
        cache=license_cache,
        session_factory=session_factory,
        allow_dev_endpoints=True,
    )


@pytest.fixture
def client(container, session_factory):
    app = create_app(container, run_background=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
