# app/services/story.py
# -*- coding: utf-8 -*-
"""
Story Protocol IP-asset registration.

Without STORY_SDK_KEY, or when the remote call fails, the site gets the
deterministic local id "story:local:<site id>".
"""

import hashlib
import json
import re
from typing import Optional

import requests

from scrapesafe_core.config import EXTERNAL_CALL_TIMEOUT, STORY_API_URL, STORY_SDK_KEY
from scrapesafe_core.app.services.external import ExternalResult, Real, Simulated

LOCAL_PREFIX = "story:local:"
_LOCAL_RE = re.compile(r"story:local:(0|[1-9][0-9]*)", re.ASCII)
_NUMERIC_RE = re.compile(r"0|[1-9][0-9]*", re.ASCII)


def local_asset_id(site_id: int) -> str:
    return f"{LOCAL_PREFIX}{site_id}"


def parse_site_id_from_asset_id(asset_id: str) -> Optional[int]:
    """"story:local:7" -> 7, "7" -> 7, anything else -> None."""
    if not asset_id:
        return None
    match = _LOCAL_RE.fullmatch(asset_id)
    if match:
        return int(match.group(1))
    if _NUMERIC_RE.fullmatch(asset_id):
        return int(asset_id)
    return None


def _sha256_hex(data: dict) -> str:
    return "0x" + hashlib.sha256(json.dumps(data, sort_keys=True).encode("utf-8")).hexdigest()


class StoryIpRegistrar:
    def __init__(
        self,
        sdk_key: Optional[str] = STORY_SDK_KEY,
        api_url: str = STORY_API_URL,
        timeout: int = EXTERNAL_CALL_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.sdk_key = sdk_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def is_configured(self) -> bool:
        return bool(self.sdk_key)

    def register(self, site_id: int, domain: str, owner_address: str) -> ExternalResult:
        if not self.sdk_key:
            simulated_id = local_asset_id(site_id)
            print(f"[Story] Simulated IP registration for {domain}: {simulated_id}")
            return Simulated(simulated_id)

        try:
            return self._register_remote(site_id, domain, owner_address)
        except Exception as e:
            print(f"[Story] Registration failed, falling back to simulation: {e}")
            return Simulated(local_asset_id(site_id))

    def _register_remote(self, site_id: int, domain: str, owner_address: str) -> Real:
        print(f"[Story] Minting and registering IP for {domain}...")

        ip_metadata = {
            "title": domain,
            "description": f"IP Asset for {domain}",
            "creators": [{"address": owner_address}],
        }
        nft_metadata = {
            "name": f"Ownership NFT for {domain}",
            "description": f"This is an NFT representing ownership of the IP Asset {domain}",
        }

        resp = self.session.post(
            self.api_url,
            json={
                "externalId": str(site_id),
                "recipient": owner_address,
                "ipMetadata": ip_metadata,
                "ipMetadataHash": _sha256_hex(ip_metadata),
                "nftMetadata": nft_metadata,
                "nftMetadataHash": _sha256_hex(nft_metadata),
            },
            headers={"X-Api-Key": self.sdk_key, "Content-Type": "application/json"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()

        ip_id = data.get("ipId")
        if not ip_id:
            raise ValueError("Failed to register IP: ipId is missing")

        print(f"[Story] Root IPA created at transaction hash {data.get('txHash')}, IPA ID: {ip_id}")
        return Real(ip_id, detail=data.get("txHash"))
