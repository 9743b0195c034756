# tests/test_rights_file.py
"""Tests for the signed rights-file ownership check."""

from scrapesafe_core.app.services.verification import RightsFileCheck, build_rights_file_template
from scrapesafe_core.app.services.verification.transport import FetchResponse

from conftest import BUYER_KEY, OWNER_ADDRESS, OWNER_KEY, FakeFetcher, json_response, personal_sign

TOKEN = "scrapesafe-abc123"
URL = "https://example.com/.well-known/scrapesafe.json"


def signed_file(key=OWNER_KEY, **overrides):
    payload = {
        "domain": "example.com",
        "owner": OWNER_ADDRESS,
        "token": TOKEN,
        "timestamp": "2024-01-01T00:00:00.000Z",
    }
    payload.update(overrides)
    return dict(payload, signature=personal_sign(key, payload))


def run_check(document, owner=OWNER_ADDRESS, response=None):
    fetcher = FakeFetcher({URL: response or json_response(document)})
    return RightsFileCheck(fetcher).check("example.com", TOKEN, owner)


class TestRightsFileCheck:

    def test_valid_file(self):
        result = run_check(signed_file())
        assert result.found is True
        assert result.valid is True
        assert result.details == "Valid rights file with verified owner signature"

    def test_owner_compared_case_insensitively(self):
        assert run_check(signed_file(), owner=OWNER_ADDRESS.lower()).ok is True

    def test_signature_from_other_key(self):
        result = run_check(signed_file(key=BUYER_KEY))
        assert result.found is True
        assert result.valid is False
        assert result.details.startswith("Invalid signature. Recovered signer: 0x")

    def test_garbage_signature(self):
        doc = signed_file()
        doc["signature"] = "0xdeadbeef"
        result = run_check(doc)
        assert result.found is True
        assert result.valid is False
        assert result.details == "Invalid signature. Recovered signer: none"

    def test_tampered_payload(self):
        doc = signed_file()
        doc["timestamp"] = "2030-01-01T00:00:00.000Z"
        assert run_check(doc).valid is False

    def test_missing_fields(self):
        doc = signed_file()
        del doc["token"]
        result = run_check(doc)
        assert result.found is True
        assert result.valid is False
        assert "missing required fields" in result.details

    def test_domain_mismatch(self):
        result = run_check(signed_file(domain="other.com"))
        assert result.valid is False
        assert result.details.startswith("Domain mismatch")

    def test_token_mismatch(self):
        result = run_check(signed_file(token="scrapesafe-wrong"))
        assert result.valid is False
        assert result.details.startswith("Token mismatch")

    def test_owner_mismatch(self):
        result = run_check(signed_file(), owner="0x0000000000000000000000000000000000000001")
        assert result.valid is False
        assert result.details.startswith("Owner mismatch")

    def test_not_found(self):
        result = RightsFileCheck(FakeFetcher()).check("example.com", TOKEN, OWNER_ADDRESS)
        assert result.found is False
        assert result.valid is False
        assert result.details == f"Failed to fetch {URL}: HTTP 404"

    def test_wrong_content_type(self):
        response = json_response(signed_file(), content_type="image/png")
        result = run_check(None, response=response)
        assert result.found is False
        assert "Invalid content type" in result.details

    def test_unparseable_body(self):
        response = FetchResponse(status_code=200, text="{not json", headers={"content-type": "application/json"})
        result = run_check(None, response=response)
        assert result.found is False
        assert result.valid is False


def test_template_payload():
    template = build_rights_file_template("example.com", OWNER_ADDRESS, TOKEN, timestamp="2024-01-01T00:00:00.000Z")
    assert template["payload"] == {
        "domain": "example.com",
        "owner": OWNER_ADDRESS,
        "token": TOKEN,
        "timestamp": "2024-01-01T00:00:00.000Z",
    }
    assert "/.well-known/scrapesafe.json" in template["instructions"]
