# app/models/license_model.py
# -*- coding: utf-8 -*-
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from scrapesafe_core.config import Base
import enum


class LicenseStatus(enum.Enum):
    pending = "pending"
    active = "active"
    revoked = "revoked"


class License(Base):
    __tablename__ = "licenses"

    id = Column(Integer, primary_key=True, index=True)

    license_terms_id = Column(Integer, ForeignKey("license_terms.id"), nullable=False, index=True)
    buyer_address = Column(String(42), nullable=False, index=True)   # always lower-cased

    # Status
    status = Column(Enum(LicenseStatus), default=LicenseStatus.pending, nullable=False)
    issued_at = Column(DateTime, default=datetime.utcnow)
    expiry = Column(DateTime, nullable=True)

    # Proof
    proof_uri = Column(String(512), nullable=True)
    proof_signature = Column(Text, nullable=True)
    tx_hash = Column(String(128), nullable=True)

    license_terms = relationship("LicenseTerms", back_populates="licenses")

    def to_dict(self):
        return {
            "id": self.id,
            "buyerAddress": self.buyer_address,
            "status": self.status.value if isinstance(self.status, LicenseStatus) else str(self.status),
            "issuedAt": self.issued_at.isoformat() if self.issued_at else None,
            "expiry": self.expiry.isoformat() if self.expiry else None,
            "proofUri": self.proof_uri,
            "proofSignature": self.proof_signature,
            "txHash": self.tx_hash,
        }

    def __repr__(self):
        return f"<License {self.id} ({self.status.value}) for {self.buyer_address}>"
