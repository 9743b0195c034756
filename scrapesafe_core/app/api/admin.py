# app/api/admin.py
# Operator actions. Caller authentication is handled outside this service.

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Optional

from scrapesafe_core.app.api.deps import client_ip, get_db, get_services, internal_error
from scrapesafe_core.app.errors import ScrapeSafeError
from scrapesafe_core.app.models.logs_model import log_event
from scrapesafe_core.app.services.container import ServiceContainer
from scrapesafe_core.app.services.licensing import system_stats

router = APIRouter(prefix="/api/admin", tags=["admin"])


class RevokeIn(BaseModel):
    licenseId: Any = None
    reason: Optional[str] = None


@router.post("/revoke-license")
def revoke_license(
    payload: RevokeIn,
    request: Request,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    try:
        result = services.issuer.revoke(db, payload.licenseId, payload.reason)
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "Revoke")

    log_event(
        db,
        action="license_revoked",
        details={"license_id": payload.licenseId, "reason": result["reason"]},
        ip_address=client_ip(request),
        endpoint="/api/admin/revoke-license",
    )
    return result


@router.get("/stats")
def stats(db: Session = Depends(get_db)):
    try:
        return system_stats(db)
    except Exception:
        return internal_error(db, "Stats")
