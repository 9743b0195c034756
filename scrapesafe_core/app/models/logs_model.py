# -*- coding: utf-8 -*-
"""
APILog Model
-------------
Audit trail for site registration, ownership verification and
license lifecycle events (purchase, revocation).
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from scrapesafe_core.config import Base
import json


class APILog(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    # Wallet address (owner or buyer) the event concerns, if any
    user = Column(String(100), nullable=True)

    # Event name, e.g. "site_verified", "license_revoked"
    action = Column(String(255), nullable=False)

    # JSON payload describing the event
    details = Column(Text, nullable=True)

    ip_address = Column(String(50), nullable=True)
    endpoint = Column(String(255), nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow)


def log_event(db_session, user=None, action="", details=None, ip_address=None, endpoint=None):
    """
    Store an audit record. Never raises: a failed audit write is rolled
    back and reported on the console so the calling operation survives.
    """
    if isinstance(details, (dict, list)):
        try:
            details = json.dumps(details, default=str)
        except (TypeError, ValueError):
            details = str(details)
    elif details is not None:
        details = str(details)

    try:
        entry = APILog(
            user=user,
            action=action,
            details=details,
            ip_address=ip_address,
            endpoint=endpoint,
        )
        db_session.add(entry)
        db_session.commit()
        return entry
    except Exception as e:
        db_session.rollback()
        print(f"[Log Error] Failed to store event {action}: {e}")
        return None
