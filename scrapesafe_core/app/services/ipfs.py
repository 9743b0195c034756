# app/services/ipfs.py
# -*- coding: utf-8 -*-
"""
IPFS pinning for license receipts.

Uses web3.storage when WEB3_STORAGE_TOKEN is set; otherwise (or when the
upload fails) the document is kept in memory under a "bafymock..." CID.
"""

import json
import threading
import time
from typing import Any, Dict, Optional

import requests

from scrapesafe_core.config import EXTERNAL_CALL_TIMEOUT, WEB3_STORAGE_TOKEN, WEB3_STORAGE_URL
from scrapesafe_core.app.services.external import ExternalResult, Real, Simulated


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = digits[r] + out
    return out or "0"


class PinningService:
    def __init__(
        self,
        token: Optional[str] = WEB3_STORAGE_TOKEN,
        upload_url: str = WEB3_STORAGE_URL,
        timeout: int = EXTERNAL_CALL_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.upload_url = upload_url
        self.timeout = timeout
        self.session = session or requests.Session()

        self._mock_storage: Dict[str, Any] = {}
        self._mock_counter = 0
        self._lock = threading.Lock()

    def is_configured(self) -> bool:
        return bool(self.token)

    def upload_json(self, data: Any, filename: Optional[str] = None) -> ExternalResult:
        """Pin `data`; the result's value is an ipfs:// URI, its detail the CID."""
        if not self.token:
            result = self._store_mock(data)
            print(f"[IPFS Mock] Stored {filename or 'data'} as {result.detail}")
            return result

        try:
            resp = self.session.post(
                self.upload_url,
                headers={"Authorization": f"Bearer {self.token}"},
                files={"file": (filename or "data.json", json.dumps(data), "application/json")},
                timeout=self.timeout,
            )
            if not 200 <= resp.status_code < 300:
                raise RuntimeError(f"web3.storage upload failed: {resp.status_code}")
            cid = resp.json()["cid"]
            return Real(f"ipfs://{cid}", detail=cid)
        except Exception as e:
            print(f"[IPFS] Upload failed, falling back to mock: {e}")
            return self._store_mock(data)

    def _store_mock(self, data: Any) -> Simulated:
        with self._lock:
            self._mock_counter += 1
            cid = f"bafymock{self._mock_counter}{_base36(int(time.time() * 1000))}"
            self._mock_storage[cid] = data
        return Simulated(f"ipfs://{cid}", detail=cid)

    def get_mock_data(self, cid: str) -> Optional[Any]:
        return self._mock_storage.get(cid)

    def clear_mock_storage(self):
        with self._lock:
            self._mock_storage.clear()
            self._mock_counter = 0
