# app/services/external.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExternalResult:
    """
    Value returned by an external collaborator.

    `Real` came from the remote service; `Simulated` is the local
    stand-in used when the service is unconfigured or failed. Callers
    accept both and surface the `simulated` flag to clients.
    """
    value: str
    detail: Optional[str] = None    # tx hash, CID, ...

    simulated = False


@dataclass(frozen=True)
class Real(ExternalResult):
    pass


@dataclass(frozen=True)
class Simulated(ExternalResult):
    simulated = True
