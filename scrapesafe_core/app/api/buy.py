# app/api/buy.py
# License purchase. Payment is simulated; the receipt is real.

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any

from scrapesafe_core.app.api.deps import client_ip, get_db, get_services, internal_error
from scrapesafe_core.app.errors import PurchaseFailedError, ScrapeSafeError, SignerNotConfigured
from scrapesafe_core.app.models.logs_model import log_event
from scrapesafe_core.app.services.container import ServiceContainer

router = APIRouter(prefix="/api", tags=["buy"])


class BuyIn(BaseModel):
    ipId: Any = None
    buyerAddress: Any = None


@router.post("/buy")
def buy(
    payload: BuyIn,
    request: Request,
    db: Session = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    try:
        result = services.issuer.purchase(db, payload.ipId, payload.buyerAddress)
    except PurchaseFailedError as e:
        log_event(
            db,
            user=payload.buyerAddress,
            action="license_purchase_failed",
            details={"ip_id": payload.ipId, "license_id": e.license_id},
            ip_address=client_ip(request),
            endpoint="/api/buy",
        )
        raise
    except SignerNotConfigured as e:
        log_event(
            db,
            user=payload.buyerAddress,
            action="license_purchase_failed",
            details={"ip_id": payload.ipId, "license_id": e.license_id, "reason": "signer_not_configured"},
            ip_address=client_ip(request),
            endpoint="/api/buy",
        )
        raise
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "Buy")

    log_event(
        db,
        user=result["receipt"]["buyerAddress"],
        action="license_purchased",
        details={"license_id": result["licenseId"], "ip_id": result["receipt"]["ipId"], "proof_mocked": result["proofMocked"]},
        ip_address=client_ip(request),
        endpoint="/api/buy",
    )
    return result
