# app/api/owner.py
# Site owners: register a domain, prove control, publish license terms.

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Optional

from scrapesafe_core.app.api.deps import client_ip, get_db, get_services, internal_error
from scrapesafe_core.app.errors import InvalidInputError, NotFoundError, ScrapeSafeError
from scrapesafe_core.app.models.logs_model import log_event
from scrapesafe_core.app.services import sites
from scrapesafe_core.app.services.container import ServiceContainer

router = APIRouter(prefix="/api/owner", tags=["owner"])


# ---------- Pydantic Schemas ----------
class RegisterIn(BaseModel):
    domain: Any = None
    ownerWallet: Any = None


class VerifyIn(BaseModel):
    siteId: Any = None
    method: Any = None


class TestMintIn(BaseModel):
    siteId: Any = None


class SetTermsIn(BaseModel):
    siteId: Any = None
    allowedActions: Any = None
    priceModel: Any = None
    pricePerUnit: Any = None
    priceToken: Optional[str] = None
    termsUri: Optional[str] = None


# ---------- Endpoints ----------
@router.post("/register", status_code=201)
def register(payload: RegisterIn, request: Request, db: Session = Depends(get_db)):
    try:
        result = sites.register_site(db, payload.domain, payload.ownerWallet)
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "Register")

    log_event(
        db,
        user=payload.ownerWallet,
        action="site_registered",
        details={"site_id": result["siteId"], "domain": result["domain"]},
        ip_address=client_ip(request),
        endpoint="/api/owner/register",
    )
    return result


@router.post("/verify")
def verify(
    payload: VerifyIn,
    request: Request,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    try:
        outcome = services.orchestrator.verify(db, payload.siteId, payload.method)
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "Verify")

    log_event(
        db,
        action="site_verified" if outcome.ok else "site_verify_failed",
        details={"site_id": payload.siteId, **outcome.to_dict()},
        ip_address=client_ip(request),
        endpoint="/api/owner/verify",
    )
    return outcome.to_dict()


@router.post("/test-mint")
def test_mint(
    payload: TestMintIn,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    """DEV ONLY: register the IP asset without an ownership check."""
    if not services.allow_dev_endpoints:
        raise NotFoundError("Not found")
    try:
        return services.orchestrator.force_verify(db, payload.siteId).to_dict()
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "TestMint")


@router.post("/set-terms")
def set_terms(payload: SetTermsIn, request: Request, db: Session = Depends(get_db)):
    try:
        terms = sites.set_terms(
            db,
            payload.siteId,
            payload.allowedActions,
            payload.priceModel,
            payload.pricePerUnit,
            price_token=payload.priceToken,
            terms_uri=payload.termsUri,
        )
        data = terms.to_dict()
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "SetTerms")

    log_event(
        db,
        action="terms_set",
        details={"site_id": data["siteId"], "terms_id": data["id"], "price_model": data["priceModel"]},
        ip_address=client_ip(request),
        endpoint="/api/owner/set-terms",
    )
    return {"licenseTerms": data}


@router.get("/site/{site_id}")
def get_site(site_id: str, db: Session = Depends(get_db)):
    if not site_id.isdigit():
        raise InvalidInputError("Invalid siteId")
    try:
        return sites.get_site(db, int(site_id))
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "GetSite")
