# app/api/deps.py
# Shared router dependencies.

import traceback

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from scrapesafe_core.config import SessionLocal
from scrapesafe_core.app.services.container import ServiceContainer


# ---------- DB dependency ----------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------- Service container ----------
def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def client_ip(request: Request):
    return request.client.host if request.client else None


def internal_error(db: Session, tag: str) -> JSONResponse:
    """Rollback, dump the traceback, answer a generic 500."""
    try:
        db.rollback()
    except Exception:
        traceback.print_exc()
    print(f"[{tag}] Unhandled error")
    traceback.print_exc()
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
