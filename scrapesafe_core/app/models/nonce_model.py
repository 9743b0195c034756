# app/models/nonce_model.py
# -*- coding: utf-8 -*-
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from datetime import datetime
from scrapesafe_core.config import Base


class Nonce(Base):
    """Single-use nonce issued to an owner wallet."""

    __tablename__ = "nonces"

    id = Column(Integer, primary_key=True, index=True)
    owner = Column(String(42), nullable=False, index=True)
    value = Column(String(128), unique=True, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
