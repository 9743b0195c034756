# app/services/verification/orchestrator.py
# -*- coding: utf-8 -*-
"""
Ownership verification state machine.

    unverified --(check succeeds)--> verified   (terminal)

A verified site is never re-checked; the prior method is reported back.
On success the site is registered as an IP asset and verified flag,
method and asset id are committed together.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from scrapesafe_core.app.errors import InvalidInputError, NotFoundError
from scrapesafe_core.app.models import Site
from scrapesafe_core.app.services.story import StoryIpRegistrar
from scrapesafe_core.app.services.verification.base import DEV_TEST_METHOD, VerificationMethod
from scrapesafe_core.app.services.verification.dns_check import DnsTxtCheck
from scrapesafe_core.app.services.verification.meta_check import MetaTagCheck
from scrapesafe_core.app.services.verification.rights_file import RightsFileCheck


class StrategySet:
    """One check per VerificationMethod member."""

    def __init__(self, dns: DnsTxtCheck, meta: MetaTagCheck, file: RightsFileCheck):
        self.dns = dns
        self.meta = meta
        self.file = file

    def for_method(self, method: VerificationMethod):
        if method is VerificationMethod.dns:
            return self.dns
        if method is VerificationMethod.meta:
            return self.meta
        if method is VerificationMethod.file:
            return self.file
        raise InvalidInputError("Invalid verification method")


@dataclass
class VerificationOutcome:
    ok: bool
    details: str
    method: Optional[str] = None
    asset_id: Optional[str] = None
    simulated: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"ok": self.ok, "details": self.details}
        if self.method is not None:
            data["method"] = self.method
        if self.asset_id is not None:
            data["storyIpId"] = self.asset_id
        if self.simulated is not None:
            data["storySimulated"] = self.simulated
        return data


def _require_site_id(site_id: Any) -> int:
    if isinstance(site_id, bool) or not isinstance(site_id, int) or site_id <= 0:
        raise InvalidInputError("siteId is required and must be a number")
    return site_id


class VerificationOrchestrator:
    def __init__(self, strategies: StrategySet, ip_registrar: StoryIpRegistrar):
        self.strategies = strategies
        self.ip_registrar = ip_registrar

    def _load_site(self, db: Session, site_id: int, lock: bool = False) -> Site:
        query = db.query(Site).filter(Site.id == site_id)
        if lock:
            # row lock held until _mark_verified commits; re-read past the identity map
            query = query.with_for_update().populate_existing()
        site = query.first()
        if not site:
            raise NotFoundError("Site not found")
        return site

    def verify(self, db: Session, site_id: Any, method: Any) -> VerificationOutcome:
        site_id = _require_site_id(site_id)
        method = VerificationMethod.parse(method)
        site = self._load_site(db, site_id)

        if site.verified:
            return self._already_verified(site)

        strategy = self.strategies.for_method(method)
        result = strategy.check(site.domain, site.verification_token, site.owner_address)
        if not result.ok:
            return VerificationOutcome(ok=False, details=result.details, method=method.value)

        # a concurrent verify may have won while the check ran
        site = self._load_site(db, site_id, lock=True)
        if site.verified:
            outcome = self._already_verified(site)
            db.rollback()
            return outcome

        registration = self.ip_registrar.register(site.id, site.domain, site.owner_address)
        self._mark_verified(db, site, method.value, registration.value)

        return VerificationOutcome(
            ok=True,
            details=result.details,
            method=method.value,
            asset_id=registration.value,
            simulated=registration.simulated,
        )

    def _already_verified(self, site: Site) -> VerificationOutcome:
        return VerificationOutcome(
            ok=True,
            details="Site already verified",
            method=site.verification_method,
            asset_id=site.story_ip_id,
        )

    def force_verify(self, db: Session, site_id: Any) -> VerificationOutcome:
        """Dev-only: register the IP asset without any ownership check."""
        site_id = _require_site_id(site_id)
        site = self._load_site(db, site_id, lock=True)

        if site.story_ip_id:
            outcome = VerificationOutcome(
                ok=True,
                details="Site already has Story IP",
                method=site.verification_method,
                asset_id=site.story_ip_id,
                simulated=site.story_ip_id.startswith("story:local:"),
            )
            db.rollback()
            return outcome

        print(f"[DEV TEST] Force minting Story IP for site {site.id}: {site.domain}")
        registration = self.ip_registrar.register(site.id, site.domain, site.owner_address)
        self._mark_verified(db, site, DEV_TEST_METHOD, registration.value)

        return VerificationOutcome(
            ok=True,
            details="Story IP minted via test endpoint",
            method=DEV_TEST_METHOD,
            asset_id=registration.value,
            simulated=registration.simulated,
        )

    def _mark_verified(self, db: Session, site: Site, method: str, asset_id: str):
        # flag, method and asset id land in one commit or not at all
        try:
            site.verified = True
            site.verification_method = method
            site.story_ip_id = asset_id
            db.add(site)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(site)
