# app/services/licensing.py
# -*- coding: utf-8 -*-
"""
License issuance engine.

    pending --(receipt signed, proof stored)--> active --(admin)--> revoked

The pending row is committed before any signing or pinning so a crash
mid-purchase leaves an inspectable record. Failures after that point
leave the row pending; nothing is rolled back.
"""

import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from scrapesafe_core.app.errors import InvalidInputError, NotFoundError, PreconditionError, PurchaseFailedError, SignerNotConfigured
from scrapesafe_core.app.models import License, LicenseStatus, LicenseTerms, Site
from scrapesafe_core.app.services.cache import LicenseCheckCache
from scrapesafe_core.app.services.ipfs import PinningService
from scrapesafe_core.app.services.pin_worker import PinQueue
from scrapesafe_core.app.services.sites import enabled_terms_for, find_site_by_asset_id
from scrapesafe_core.app.services.story import local_asset_id
from scrapesafe_core.app.utils.generator import iso_timestamp
from scrapesafe_core.app.utils.signer import ServerSigner
from scrapesafe_core.app.utils.validators import require_address


def asset_aliases(site: Site) -> List[str]:
    """Every identifier a client may use for this site's asset."""
    aliases = [site.asset_id, local_asset_id(site.id), str(site.id)]
    return list(dict.fromkeys(aliases))


def build_receipt(lic: License, site: Site, terms: LicenseTerms, issuer: str, issued_at: datetime) -> Dict[str, Any]:
    return {
        "licenseId": lic.id,
        "ipId": site.asset_id,
        "siteId": site.id,
        "domain": site.domain,
        "buyerAddress": lic.buyer_address,
        "issuer": issuer,
        "termsId": terms.id,
        "termsUri": terms.terms_uri,
        "allowedActions": terms.actions,
        "priceModel": terms.price_model,
        "pricePerUnit": terms.price_per_unit,
        "priceToken": terms.price_token,
        "issuedAt": iso_timestamp(issued_at),
        "expiry": iso_timestamp(lic.expiry) if lic.expiry else None,
    }


class LicenseIssuer:
    def __init__(
        self,
        signer: ServerSigner,
        cache: LicenseCheckCache,
        pinning: PinningService,
        pin_queue: Optional[PinQueue] = None,
        now: Callable[[], datetime] = datetime.utcnow,
    ):
        self.signer = signer
        self.cache = cache
        self.pinning = pinning
        self.pin_queue = pin_queue
        self.now = now

    # -----------------------------
    # Purchase
    # -----------------------------
    def purchase(self, db: Session, asset_id: Any, buyer_address: Any) -> Dict[str, Any]:
        if not asset_id or not isinstance(asset_id, str):
            raise InvalidInputError("ipId is required")
        require_address(buyer_address, "buyerAddress")
        buyer = buyer_address.lower()

        site = find_site_by_asset_id(db, asset_id)
        if not site:
            raise NotFoundError("Asset not found")

        terms = enabled_terms_for(db, site.id)
        if terms is None:
            if site.license_terms:
                raise PreconditionError("License terms are not enabled")
            raise PreconditionError("No license terms available for this asset")

        issued_at = self.now()
        lic = License(
            license_terms_id=terms.id,
            buyer_address=buyer,
            status=LicenseStatus.pending,
            issued_at=issued_at,
        )
        db.add(lic)
        db.commit()
        db.refresh(lic)
        license_id = lic.id

        try:
            receipt = build_receipt(lic, site, terms, self.signer.address, issued_at)
            signature = self.signer.sign_canonical(receipt)
            proof = self.pinning.upload_json({"receipt": receipt, "signature": signature}, f"license-{license_id}.json")

            lic.proof_signature = signature
            lic.proof_uri = proof.value
            lic.status = LicenseStatus.active
            db.commit()
        except SignerNotConfigured as e:
            db.rollback()
            e.license_id = license_id
            raise
        except Exception as e:
            db.rollback()
            print(f"[License] Purchase {license_id} failed, left pending: {e}")
            raise PurchaseFailedError("Failed to issue license", license_id=license_id)

        if proof.simulated and self.pinning.is_configured() and self.pin_queue is not None:
            self.pin_queue.enqueue(license_id, {"receipt": receipt, "signature": signature})

        self.cache.invalidate(asset_aliases(site), buyer)

        payment_note = (
            f"NOTE: payment is simulated. In production, buyer ({buyer_address}) would transfer "
            f"{terms.price_per_unit} {terms.price_token} to site owner ({site.owner_address})."
        )

        return {
            "licenseId": license_id,
            "receipt": receipt,
            "signature": signature,
            "proofUri": proof.value,
            "proofMocked": proof.simulated,
            "paymentNote": payment_note,
        }

    # -----------------------------
    # Revoke
    # -----------------------------
    def revoke(self, db: Session, license_id: Any, reason: Optional[str] = None) -> Dict[str, Any]:
        if isinstance(license_id, bool) or not isinstance(license_id, int) or license_id <= 0:
            raise InvalidInputError("licenseId is required and must be a number")

        lic = db.query(License).filter(License.id == license_id).first()
        if not lic:
            raise NotFoundError("License not found")
        if lic.status == LicenseStatus.revoked:
            raise PreconditionError("License is already revoked")
        if lic.status != LicenseStatus.active:
            raise PreconditionError("Only active licenses can be revoked")

        site = lic.license_terms.site
        try:
            lic.status = LicenseStatus.revoked
            db.commit()
        except Exception:
            db.rollback()
            raise

        self.cache.invalidate(asset_aliases(site), lic.buyer_address)

        return {
            "success": True,
            "message": f"License {license_id} has been revoked",
            "reason": reason or "No reason provided",
        }

    # -----------------------------
    # Queries
    # -----------------------------
    def check_license(self, db: Session, asset_id: Any, buyer: Any) -> Dict[str, Any]:
        if not asset_id or not isinstance(asset_id, str):
            raise InvalidInputError("ipId query parameter is required")
        if not buyer or not isinstance(buyer, str):
            raise InvalidInputError("buyer query parameter is required")
        buyer = buyer.lower()

        site = find_site_by_asset_id(db, asset_id)
        if not site:
            raise NotFoundError("Asset not found")

        # keyed on the canonical id so every spelling shares one entry
        cache_key = site.asset_id
        cached = self.cache.get(cache_key, buyer)
        if cached is not None:
            out = {"hasLicense": cached["hasLicense"], "cached": True}
            if cached.get("licenseId") is not None:
                out["licenseId"] = cached["licenseId"]
            return out

        lic = (
            db.query(License)
            .join(LicenseTerms, License.license_terms_id == LicenseTerms.id)
            .filter(
                License.buyer_address == buyer,
                License.status == LicenseStatus.active,
                LicenseTerms.site_id == site.id,
                LicenseTerms.enabled == True,  # noqa: E712
                or_(License.expiry.is_(None), License.expiry > self.now()),
            )
            .order_by(License.id.desc())
            .first()
        )

        self.cache.set(cache_key, buyer, lic is not None, lic.id if lic else None)

        if lic is None:
            return {"hasLicense": False, "cached": False}
        return {
            "hasLicense": True,
            "licenseId": lic.id,
            "proof": {"signature": lic.proof_signature, "uri": lic.proof_uri},
            "cached": False,
        }

    def get_license(self, db: Session, license_id: int) -> Dict[str, Any]:
        lic = db.query(License).filter(License.id == license_id).first()
        if not lic:
            raise NotFoundError("License not found")
        terms = lic.license_terms
        site = terms.site
        return {
            "license": lic.to_dict(),
            "terms": {
                "id": terms.id,
                "allowedActions": terms.actions,
                "priceModel": terms.price_model,
                "pricePerUnit": terms.price_per_unit,
                "priceToken": terms.price_token,
                "termsUri": terms.terms_uri,
            },
            "site": {
                "id": site.id,
                "domain": site.domain,
                "storyIpId": site.story_ip_id,
                "ownerAddress": site.owner_address,
            },
        }

    def validate_proof(self, receipt_json: Any, signature: Any) -> Dict[str, Any]:
        if not receipt_json:
            raise InvalidInputError("receiptJson is required")
        if not signature or not isinstance(signature, str):
            raise InvalidInputError("signature is required and must be a string")

        receipt = receipt_json
        if isinstance(receipt_json, str):
            try:
                receipt = json.loads(receipt_json)
            except ValueError:
                raise InvalidInputError("receiptJson is not valid JSON")

        result = self.signer.verify_receipt(receipt, signature)
        return {
            "valid": result.valid,
            "signer": result.signer,
            "expectedSigner": self.signer.address,
        }


def system_stats(db: Session) -> Dict[str, Any]:
    return {
        "sites": {
            "total": db.query(Site).count(),
            "verified": db.query(Site).filter(Site.verified == True).count(),  # noqa: E712
        },
        "licenses": {
            "total": db.query(License).count(),
            "active": db.query(License).filter(License.status == LicenseStatus.active).count(),
        },
    }
