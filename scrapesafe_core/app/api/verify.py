# app/api/verify.py
# License lookups and receipt validation (public).

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Optional

from scrapesafe_core.app.api.deps import get_db, get_services, internal_error
from scrapesafe_core.app.errors import InvalidInputError, ScrapeSafeError, SignerNotConfigured
from scrapesafe_core.app.services.container import ServiceContainer

router = APIRouter(prefix="/api", tags=["verify"])


class ValidateProofIn(BaseModel):
    receiptJson: Any = None
    signature: Any = None


@router.get("/license/{license_id}")
def get_license(
    license_id: str,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    if not license_id.isdigit():
        raise InvalidInputError("Invalid licenseId")
    try:
        return services.issuer.get_license(db, int(license_id))
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "GetLicense")


@router.get("/check-license")
def check_license(
    ipId: Optional[str] = None,
    buyer: Optional[str] = None,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.issuer.check_license(db, ipId, buyer)
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "CheckLicense")


@router.post("/validate-proof")
def validate_proof(
    payload: ValidateProofIn,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.issuer.validate_proof(payload.receiptJson, payload.signature)
    except (ScrapeSafeError, SignerNotConfigured):
        raise
    except Exception:
        return internal_error(db, "ValidateProof")
