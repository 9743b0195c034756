# app/services/pin_worker.py
# -*- coding: utf-8 -*-
"""
Retries receipt pins that fell back to a mock URI.

Purchase queues a job when pinning is configured but the upload did not
land. Each `process_pending()` pass retries every queued job once; a
real pin replaces the license's proofUri, a failed one is requeued until
`retry_limit` attempts have been spent.
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from scrapesafe_core.config import PIN_RETRY_LIMIT
from scrapesafe_core.app.models import License
from scrapesafe_core.app.services.ipfs import PinningService


@dataclass
class PinJob:
    license_id: int
    data: Any
    retries: int = 0


class PinQueue:
    def __init__(self, pinning: PinningService, session_factory: Callable[[], Session], retry_limit: int = PIN_RETRY_LIMIT):
        self.pinning = pinning
        self.session_factory = session_factory
        self.retry_limit = retry_limit
        self._jobs = deque()
        self._lock = threading.Lock()
        self._processing = False

    def enqueue(self, license_id: int, data: Any):
        with self._lock:
            self._jobs.append(PinJob(license_id=license_id, data=data))
        print(f"[PinWorker] Queued pin for license {license_id}")

    def process_pending(self) -> int:
        """Run one pass over the queue; returns the number of licenses updated."""
        with self._lock:
            if self._processing:
                return 0
            self._processing = True
            jobs = list(self._jobs)
            self._jobs.clear()

        pinned = 0
        try:
            for job in jobs:
                if self._process_job(job):
                    pinned += 1
                    continue
                job.retries += 1
                if job.retries < self.retry_limit:
                    with self._lock:
                        self._jobs.append(job)
                    print(f"[PinWorker] Retrying job for license {job.license_id} (attempt {job.retries + 1})")
                else:
                    print(f"[PinWorker] Giving up on license {job.license_id} after {job.retries} attempts")
        finally:
            with self._lock:
                self._processing = False
        return pinned

    def _process_job(self, job: PinJob) -> bool:
        if not self.pinning.is_configured():
            print(f"[PinWorker] IPFS not configured, skipping pin for license {job.license_id}")
            return False

        print(f"[PinWorker] Pinning data for license {job.license_id}")
        result = self.pinning.upload_json(job.data, f"license-{job.license_id}.json")
        if result.simulated:
            return False

        db = self.session_factory()
        try:
            lic = db.query(License).filter(License.id == job.license_id).first()
            if not lic:
                print(f"[PinWorker] License {job.license_id} no longer exists")
                return False
            lic.proof_uri = result.value
            db.commit()
            print(f"[PinWorker] Updated license {job.license_id} with IPFS URI: {result.value}")
            return True
        except Exception as e:
            db.rollback()
            print(f"[PinWorker] Failed to update license {job.license_id}: {e}")
            return False
        finally:
            db.close()

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {"pending": len(self._jobs), "processing": self._processing}

    def clear(self):
        with self._lock:
            self._jobs.clear()
