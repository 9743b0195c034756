# app/services/container.py
# -*- coding: utf-8 -*-
"""
Wires the process-wide collaborators together once at startup.

Routers reach the container through `request.app.state.services`; tests
build their own with fakes and pass it to `create_app()`.
"""

import time
from typing import Callable, List, Optional

from scrapesafe_core.config import (
    ALLOW_DEV_ENDPOINTS,
    CACHE_SWEEP_INTERVAL_SECONDS,
    LICENSE_CACHE_TTL_SECONDS,
    PIN_RETRY_LIMIT,
    PIN_WORKER_INTERVAL_SECONDS,
    REDIS_URL,
    VERIFY_HTTP_TIMEOUT,
    SessionLocal,
)
from scrapesafe_core.app.services.background import PeriodicTask
from scrapesafe_core.app.services.cache import LicenseCheckCache, build_cache_store
from scrapesafe_core.app.services.ipfs import PinningService
from scrapesafe_core.app.services.licensing import LicenseIssuer
from scrapesafe_core.app.services.pin_worker import PinQueue
from scrapesafe_core.app.services.story import StoryIpRegistrar
from scrapesafe_core.app.services.verification import (
    DnsTxtCheck,
    MetaTagCheck,
    RightsFileCheck,
    StrategySet,
    VerificationOrchestrator,
)
from scrapesafe_core.app.services.verification.transport import DnsPythonResolver, HttpFetcher, RequestsFetcher, TxtResolver
from scrapesafe_core.app.utils.signer import ServerSigner


class ServiceContainer:
    def __init__(
        self,
        signer: Optional[ServerSigner] = None,
        resolver: Optional[TxtResolver] = None,
        fetcher: Optional[HttpFetcher] = None,
        ip_registrar: Optional[StoryIpRegistrar] = None,
        pinning: Optional[PinningService] = None,
        cache: Optional[LicenseCheckCache] = None,
        session_factory: Callable = SessionLocal,
        clock: Callable[[], float] = time.time,
        allow_dev_endpoints: bool = ALLOW_DEV_ENDPOINTS,
    ):
        self.signer = signer or ServerSigner()
        self.session_factory = session_factory
        self.allow_dev_endpoints = allow_dev_endpoints

        fetcher = fetcher or RequestsFetcher()
        self.strategies = StrategySet(
            dns=DnsTxtCheck(resolver or DnsPythonResolver()),
            meta=MetaTagCheck(fetcher, timeout=VERIFY_HTTP_TIMEOUT),
            file=RightsFileCheck(fetcher, verify=self.signer.verify_owner_signature, timeout=VERIFY_HTTP_TIMEOUT),
        )
        self.ip_registrar = ip_registrar or StoryIpRegistrar()
        self.orchestrator = VerificationOrchestrator(self.strategies, self.ip_registrar)

        self.pinning = pinning or PinningService()
        self.pin_queue = PinQueue(self.pinning, session_factory, retry_limit=PIN_RETRY_LIMIT)
        self.cache = cache or LicenseCheckCache(build_cache_store(REDIS_URL, clock), ttl_seconds=LICENSE_CACHE_TTL_SECONDS)
        self.issuer = LicenseIssuer(self.signer, self.cache, self.pinning, pin_queue=self.pin_queue)

        self.tasks: List[PeriodicTask] = [
            PeriodicTask("CacheSweep", CACHE_SWEEP_INTERVAL_SECONDS, self.cache.sweep),
            PeriodicTask("PinWorker", PIN_WORKER_INTERVAL_SECONDS, self.pin_queue.process_pending),
        ]

    def start_background(self):
        for task in self.tasks:
            task.start()

    def stop_background(self):
        for task in self.tasks:
            if task.running:
                task.stop()
