# app/models/license_terms_model.py
# -*- coding: utf-8 -*-
from sqlalchemy import Column, Integer, String, DateTime, Float, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from scrapesafe_core.config import Base
import enum
import json


class PriceModel(enum.Enum):
    PER_SCRAPE = "PER_SCRAPE"
    SUBSCRIPTION = "SUBSCRIPTION"
    FLAT = "FLAT"


class LicenseTerms(Base):
    __tablename__ = "license_terms"

    id = Column(Integer, primary_key=True, index=True)
    site_id = Column(Integer, ForeignKey("sites.id"), nullable=False, index=True)

    # Ordered list of action tags, stored as JSON text
    allowed_actions = Column(Text, nullable=False)

    price_model = Column(String(20), nullable=False)
    price_per_unit = Column(Float, nullable=False)
    price_token = Column(String(20), default="USD", nullable=False)
    terms_uri = Column(String(512), nullable=True)

    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    site = relationship("Site", back_populates="license_terms")
    licenses = relationship("License", back_populates="license_terms", order_by="License.id")

    @property
    def actions(self):
        return json.loads(self.allowed_actions) if self.allowed_actions else []

    def to_dict(self, include_licenses: bool = False):
        data = {
            "id": self.id,
            "siteId": self.site_id,
            "allowedActions": self.actions,
            "priceModel": self.price_model,
            "pricePerUnit": self.price_per_unit,
            "priceToken": self.price_token,
            "termsUri": self.terms_uri,
            "enabled": bool(self.enabled),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_licenses:
            data["licenses"] = [lic.to_dict() for lic in self.licenses]
        return data
