# app/services/sites.py
# -*- coding: utf-8 -*-
"""
Site registry: registration, license terms and market listings.
"""

import json
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrapesafe_core.app.errors import ConflictError, InvalidInputError, NotFoundError, PreconditionError
from scrapesafe_core.app.models import LicenseTerms, PriceModel, Site
from scrapesafe_core.app.services.story import parse_site_id_from_asset_id
from scrapesafe_core.app.services.verification.dns_check import record_name
from scrapesafe_core.app.services.verification.rights_file import build_rights_file_template, rights_file_url
from scrapesafe_core.app.utils.generator import generate_verification_token
from scrapesafe_core.app.utils.validators import is_valid_address, normalize_domain


# -----------------------------
# Lookups
# -----------------------------
def find_site_by_asset_id(db: Session, asset_id: str) -> Optional[Site]:
    """External asset id first, then the numeric / story:local: fallback."""
    if not asset_id:
        return None
    site = db.query(Site).filter(Site.story_ip_id == asset_id).first()
    if site:
        return site
    site_id = parse_site_id_from_asset_id(asset_id)
    if site_id is None:
        return None
    return db.query(Site).filter(Site.id == site_id).first()


def enabled_terms_for(db: Session, site_id: int) -> Optional[LicenseTerms]:
    return (
        db.query(LicenseTerms)
        .filter(LicenseTerms.site_id == site_id, LicenseTerms.enabled == True)  # noqa: E712
        .order_by(LicenseTerms.id)
        .first()
    )


def require_site_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError("siteId is required and must be a number")
    return value


def site_summary(site: Site) -> Dict[str, Any]:
    return {
        "id": site.id,
        "domain": site.domain,
        "ownerAddress": site.owner_address,
        "storyIpId": site.story_ip_id,
        "verified": bool(site.verified),
    }


# -----------------------------
# Registration
# -----------------------------
def verification_instructions(domain: str, owner: str, token: str) -> Dict[str, Any]:
    template = build_rights_file_template(domain, owner, token)
    return {
        "dns": f"Add a TXT record at {record_name(domain)} with value: {token}",
        "meta": f'Add to your HTML <head>: <meta name="scrapesafe" content="{token}">',
        "file": f"Place a signed JSON file at {rights_file_url(domain)}",
        "fileTemplate": template["payload"],
        "fileInstructions": template["instructions"],
    }


def _conflict(site: Site) -> ConflictError:
    return ConflictError("Site already registered", siteId=site.id, verified=bool(site.verified))


def register_site(db: Session, domain: Any, owner_wallet: Any) -> Dict[str, Any]:
    if not domain or not isinstance(domain, str):
        raise InvalidInputError("domain is required and must be a string")
    if not owner_wallet or not isinstance(owner_wallet, str):
        raise InvalidInputError("ownerWallet is required and must be a string")
    if not is_valid_address(owner_wallet):
        raise InvalidInputError("Invalid wallet address format")

    normalized = normalize_domain(domain)

    existing = db.query(Site).filter(Site.domain == normalized).first()
    if existing:
        raise _conflict(existing)

    token = generate_verification_token()
    site = Site(
        domain=normalized,
        owner_address=owner_wallet,
        verification_token=token,
        verified=False,
    )
    try:
        db.add(site)
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same domain
        db.rollback()
        existing = db.query(Site).filter(Site.domain == normalized).first()
        if existing:
            raise _conflict(existing)
        raise
    db.refresh(site)

    return {
        "siteId": site.id,
        "domain": site.domain,
        "verificationToken": token,
        "instructions": verification_instructions(normalized, owner_wallet, token),
    }


def get_site(db: Session, site_id: int) -> Dict[str, Any]:
    site = db.query(Site).filter(Site.id == site_id).first()
    if not site:
        raise NotFoundError("Site not found")

    return {
        "site": {
            "id": site.id,
            "domain": site.domain,
            "ownerAddress": site.owner_address,
            "storyIpId": site.story_ip_id,
            "verified": bool(site.verified),
            "verificationMethod": site.verification_method,
            "createdAt": site.created_at.isoformat() if site.created_at else None,
        },
        "licenseTerms": [t.to_dict(include_licenses=True) for t in site.license_terms],
    }


# -----------------------------
# License terms
# -----------------------------
def _validate_actions(allowed_actions: Any) -> List[str]:
    if not isinstance(allowed_actions, list) or not allowed_actions:
        raise InvalidInputError("allowedActions must be a non-empty array")
    actions: List[str] = []
    for action in allowed_actions:
        if not isinstance(action, str) or not action.strip():
            raise InvalidInputError("allowedActions must contain non-empty strings")
        if action not in actions:
            actions.append(action)
    return actions


def _validate_price(price_per_unit: Any) -> float:
    if (
        isinstance(price_per_unit, bool)
        or not isinstance(price_per_unit, (int, float))
        or not math.isfinite(price_per_unit)
        or price_per_unit < 0
    ):
        raise InvalidInputError("pricePerUnit must be a non-negative number")
    return price_per_unit


def set_terms(
    db: Session,
    site_id: Any,
    allowed_actions: Any,
    price_model: Any,
    price_per_unit: Any,
    price_token: Optional[str] = None,
    terms_uri: Optional[str] = None,
) -> LicenseTerms:
    """Update the site's enabled terms row, or create it."""
    site_id = require_site_id(site_id)
    actions = _validate_actions(allowed_actions)
    if price_model not in PriceModel.__members__:
        raise InvalidInputError("priceModel must be one of: PER_SCRAPE, SUBSCRIPTION, FLAT")
    price = _validate_price(price_per_unit)

    site = db.query(Site).filter(Site.id == site_id).first()
    if not site:
        raise NotFoundError("Site not found")
    if not site.verified:
        raise PreconditionError("Site must be verified before setting terms", status_code=403)

    terms = enabled_terms_for(db, site_id)
    if terms is None:
        terms = LicenseTerms(site_id=site_id, enabled=True)
        db.add(terms)

    terms.allowed_actions = json.dumps(actions)
    terms.price_model = PriceModel[price_model].value
    terms.price_per_unit = price
    terms.price_token = price_token or "USD"
    terms.terms_uri = terms_uri or None

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(terms)
    return terms


# -----------------------------
# Market
# -----------------------------
def list_market(db: Session) -> List[Dict[str, Any]]:
    listings = (
        db.query(LicenseTerms)
        .filter(LicenseTerms.enabled == True)  # noqa: E712
        .order_by(LicenseTerms.created_at.desc(), LicenseTerms.id.desc())
        .all()
    )
    return [{"site": site_summary(t.site), "licenseTerms": t.to_dict()} for t in listings]


def get_asset(db: Session, asset_id: str) -> Dict[str, Any]:
    if not asset_id:
        raise InvalidInputError("ipId is required")
    site = find_site_by_asset_id(db, asset_id)
    if not site:
        raise NotFoundError("Asset not found")
    terms = enabled_terms_for(db, site.id)
    return {
        "site": site_summary(site),
        "licenseTerms": terms.to_dict() if terms else None,
    }
