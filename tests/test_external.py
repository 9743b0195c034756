# tests/test_external.py
"""Tests for IP registration and IPFS pinning, real and simulated."""

import pytest

from scrapesafe_core.app.services.external import Real, Simulated
from scrapesafe_core.app.services.ipfs import PinningService
from scrapesafe_core.app.services.story import StoryIpRegistrar, local_asset_id, parse_site_id_from_asset_id

from conftest import OWNER_ADDRESS, FakeHttpResponse, FakeSession


@pytest.mark.parametrize(
    "asset_id, expected",
    [("story:local:7", 7), ("7", 7), ("0xabc", None), ("story:local:", None), ("", None), ("story:local:7x", None),
     ("07", None), ("story:local:07", None), ("\u0661", None), ("story:local:\u0661", None), ("7\n", None)],
)
def test_parse_site_id(asset_id, expected):
    assert parse_site_id_from_asset_id(asset_id) == expected


class TestStoryIpRegistrar:

    def test_unconfigured_is_simulated(self):
        result = StoryIpRegistrar(sdk_key=None).register(3, "example.com", OWNER_ADDRESS)
        assert isinstance(result, Simulated)
        assert result.simulated is True
        assert result.value == local_asset_id(3) == "story:local:3"

    def test_remote_success(self):
        session = FakeSession(FakeHttpResponse(200, {"ipId": "0xIP", "txHash": "0xTX"}))
        result = StoryIpRegistrar(sdk_key="key", session=session).register(3, "example.com", OWNER_ADDRESS)
        assert isinstance(result, Real)
        assert result.simulated is False
        assert result.value == "0xIP"
        assert result.detail == "0xTX"
        assert session.posts[0]["headers"]["X-Api-Key"] == "key"
        assert session.posts[0]["json"]["recipient"] == OWNER_ADDRESS

    def test_remote_failure_falls_back(self):
        session = FakeSession(error=ConnectionError("refused"))
        result = StoryIpRegistrar(sdk_key="key", session=session).register(3, "example.com", OWNER_ADDRESS)
        assert result.simulated is True
        assert result.value == "story:local:3"

    def test_missing_ip_id_falls_back(self):
        session = FakeSession(FakeHttpResponse(200, {"txHash": "0xTX"}))
        result = StoryIpRegistrar(sdk_key="key", session=session).register(3, "example.com", OWNER_ADDRESS)
        assert result.simulated is True


class TestPinningService:

    def test_unconfigured_stores_mock(self):
        pinning = PinningService(token=None)
        result = pinning.upload_json({"a": 1}, "x.json")
        assert result.simulated is True
        assert result.value == f"ipfs://{result.detail}"
        assert result.detail.startswith("bafymock1")
        assert pinning.get_mock_data(result.detail) == {"a": 1}

    def test_mock_cids_are_unique(self):
        pinning = PinningService(token=None)
        assert pinning.upload_json({}).value != pinning.upload_json({}).value

    def test_clear_mock_storage(self):
        pinning = PinningService(token=None)
        cid = pinning.upload_json({"a": 1}).detail
        pinning.clear_mock_storage()
        assert pinning.get_mock_data(cid) is None

    def test_real_upload(self):
        session = FakeSession(FakeHttpResponse(200, {"cid": "bafyreal"}))
        result = PinningService(token="t", session=session).upload_json({"a": 1}, "x.json")
        assert isinstance(result, Real)
        assert result.value == "ipfs://bafyreal"
        assert session.posts[0]["headers"]["Authorization"] == "Bearer t"

    def test_http_error_falls_back(self):
        session = FakeSession(FakeHttpResponse(500))
        result = PinningService(token="t", session=session).upload_json({"a": 1})
        assert result.simulated is True
        assert result.value.startswith("ipfs://bafymock")
