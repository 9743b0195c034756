# Import every model so Base.metadata knows all tables before create_all().
from scrapesafe_core.app.models.site_model import Site
from scrapesafe_core.app.models.license_terms_model import LicenseTerms, PriceModel
from scrapesafe_core.app.models.license_model import License, LicenseStatus
from scrapesafe_core.app.models.nonce_model import Nonce
from scrapesafe_core.app.models.logs_model import APILog, log_event

__all__ = [
    "Site",
    "LicenseTerms",
    "PriceModel",
    "License",
    "LicenseStatus",
    "Nonce",
    "APILog",
    "log_event",
]
