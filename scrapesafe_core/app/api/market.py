# app/api/market.py
# Public listings of licensable assets.

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scrapesafe_core.app.api.deps import get_db, internal_error
from scrapesafe_core.app.errors import ScrapeSafeError
from scrapesafe_core.app.services import sites

router = APIRouter(prefix="/api", tags=["market"])


@router.get("/market")
def list_market(db: Session = Depends(get_db)):
    try:
        return sites.list_market(db)
    except Exception:
        return internal_error(db, "Market")


@router.get("/asset/{asset_id}")
def get_asset(asset_id: str, db: Session = Depends(get_db)):
    try:
        return sites.get_asset(db, asset_id)
    except ScrapeSafeError:
        raise
    except Exception:
        return internal_error(db, "Asset")
