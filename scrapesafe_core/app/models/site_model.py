# app/models/site_model.py
# -*- coding: utf-8 -*-
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from scrapesafe_core.config import Base


class Site(Base):
    __tablename__ = "sites"

    id = Column(Integer, primary_key=True, index=True)

    # Identity
    domain = Column(String(255), unique=True, nullable=False, index=True)
    owner_address = Column(String(42), nullable=False)

    # Verification (token is written once at registration)
    verification_token = Column(String(64), nullable=False)
    verified = Column(Boolean, default=False, nullable=False)
    verification_method = Column(String(20), nullable=True)   # dns / meta / file / dev-test

    # External IP asset (null until verified)
    story_ip_id = Column(String(128), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    license_terms = relationship("LicenseTerms", back_populates="site", order_by="LicenseTerms.id")

    @property
    def asset_id(self) -> str:
        """External asset identifier, or the deterministic local fallback."""
        return self.story_ip_id or f"story:local:{self.id}"

    def __repr__(self):
        return f"<Site {self.domain} (verified={self.verified})>"
