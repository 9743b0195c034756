from scrapesafe_core.app.services.verification.base import CheckResult, VerificationMethod, DEV_TEST_METHOD
from scrapesafe_core.app.services.verification.dns_check import DnsTxtCheck
from scrapesafe_core.app.services.verification.meta_check import MetaTagCheck
from scrapesafe_core.app.services.verification.rights_file import RightsFileCheck, build_rights_file_template
from scrapesafe_core.app.services.verification.orchestrator import (
    StrategySet,
    VerificationOrchestrator,
    VerificationOutcome,
)

__all__ = [
    "CheckResult",
    "VerificationMethod",
    "DEV_TEST_METHOD",
    "DnsTxtCheck",
    "MetaTagCheck",
    "RightsFileCheck",
    "build_rights_file_template",
    "StrategySet",
    "VerificationOrchestrator",
    "VerificationOutcome",
]
