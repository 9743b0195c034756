# -*- coding: utf-8 -*-
"""
ScrapeSafe Core - Domain Ownership & License Server
---------------------------------------------------
Central engine for:
- Site registration + ownership verification (DNS / meta / rights file)
- License terms + market listings
- Signed license receipts (purchase, check, validate, revoke)
- Background cache sweep + IPFS pin retries
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scrapesafe_core.config import Base, engine
from scrapesafe_core.app.errors import ScrapeSafeError, SignerNotConfigured
from scrapesafe_core.app.services.container import ServiceContainer
from scrapesafe_core.app.utils.generator import iso_timestamp

# Import models so every table is registered on Base.metadata
from scrapesafe_core.app import models  # noqa: F401

# -----------------------------
# Import Routers
# -----------------------------
from scrapesafe_core.app.api.owner import router as owner_router
from scrapesafe_core.app.api.market import router as market_router
from scrapesafe_core.app.api.buy import router as buy_router
from scrapesafe_core.app.api.verify import router as verify_router
from scrapesafe_core.app.api.admin import router as admin_router


def create_app(container: Optional[ServiceContainer] = None, run_background: bool = True) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print("🔧 Creating database tables...")
        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")

        services: ServiceContainer = app.state.services
        try:
            print(f"[Signer] Server address: {services.signer.address}")
        except SignerNotConfigured as e:
            print(f"[Signer] {e}; purchases and proof validation will fail")

        if run_background:
            services.start_background()
        try:
            yield
        finally:
            services.stop_background()

    app = FastAPI(title="ScrapeSafe Core - License Server", lifespan=lifespan)
    app.state.services = container or ServiceContainer()

    # -----------------------------
    # Error translation
    # -----------------------------
    @app.exception_handler(ScrapeSafeError)
    async def scrapesafe_error_handler(request: Request, exc: ScrapeSafeError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(SignerNotConfigured)
    async def signer_error_handler(request: Request, exc: SignerNotConfigured):
        print(f"[Signer] {exc}")
        body = {"error": "Server signer is not configured"}
        if exc.license_id is not None:
            body["licenseId"] = exc.license_id
        return JSONResponse(status_code=500, content=body)

    # ----------------------------------------------------------
    # ROUTERS
    # ----------------------------------------------------------
    app.include_router(owner_router)
    app.include_router(market_router)
    app.include_router(buy_router)
    app.include_router(verify_router)
    app.include_router(admin_router)

    # ----------------------------------------------------------
    # System Status
    # ----------------------------------------------------------
    @app.get("/health", tags=["system"])
    def health():
        try:
            server_address = app.state.services.signer.address
        except SignerNotConfigured:
            server_address = None
        return {
            "status": "ok",
            "timestamp": iso_timestamp(datetime.utcnow()),
            "serverAddress": server_address,
        }

    return app


app = create_app()
