# app/utils/signer.py
"""
Server signing identity + signature recovery.

Uses EIP-191 personal_sign: the message is prefixed with
"\\x19Ethereum Signed Message:\\n<len>" before hashing, so a receipt
signature can never be replayed as a transaction signature.
"""

import os
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from eth_account import Account
from eth_account.messages import encode_defunct

from scrapesafe_core.config import SERVER_SIGNER_ENV
from scrapesafe_core.app.errors import SignerNotConfigured
from scrapesafe_core.app.utils.canonical import canonical


@dataclass(frozen=True)
class SignatureCheck:
    valid: bool
    signer: str    # recovered address, "" when recovery failed


# -----------------------------
# RECOVERY (no identity needed)
# -----------------------------
def recover_signer(message: str, signature: str) -> str:
    """Recover the checksummed address that signed `message`, or ""."""
    if not signature or not isinstance(signature, str):
        return ""
    try:
        return Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception:
        # eth-account raises several types for malformed input
        return ""


def _same_address(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


def _check(payload: Any, signature: str, expected: Optional[str]) -> SignatureCheck:
    try:
        message = canonical(payload)
    except (TypeError, ValueError):
        return SignatureCheck(valid=False, signer="")
    signer = recover_signer(message, signature)
    return SignatureCheck(valid=_same_address(signer, expected), signer=signer)


def verify_owner_signature(payload: Any, signature: str, expected_owner: str) -> SignatureCheck:
    """Check a third-party (site owner) signature over canonical(payload)."""
    return _check(payload, signature, expected_owner)


# -----------------------------
# SERVER IDENTITY
# -----------------------------
class ServerSigner:
    """
    The process signing identity. Build one at startup and hand it to
    every component that signs or verifies receipts.

    The key is materialized on first use; a missing secret raises
    SignerNotConfigured.
    """

    def __init__(self, private_key: Optional[str] = None, secret_source: Optional[Callable[[], Optional[str]]] = None):
        self._private_key = private_key
        self._secret_source = secret_source or (lambda: os.environ.get(SERVER_SIGNER_ENV))
        self._account = None
        self._lock = threading.Lock()

    def _get_account(self):
        if self._account is not None:
            return self._account

        with self._lock:
            if self._account is None:
                key = self._private_key or self._secret_source()
                if not key:
                    raise SignerNotConfigured(f"{SERVER_SIGNER_ENV} environment variable is required")
                try:
                    account = Account.from_key(key)
                except (ValueError, TypeError) as e:
                    raise SignerNotConfigured(f"{SERVER_SIGNER_ENV} is not a valid private key: {e}")
                print(f"[Signer] Server signer initialized: {account.address}")
                self._account = account
        return self._account

    @property
    def address(self) -> str:
        return self._get_account().address

    def sign(self, message: str) -> str:
        signed = self._get_account().sign_message(encode_defunct(text=message))
        return "0x" + bytes(signed.signature).hex()

    def sign_canonical(self, payload: Any) -> str:
        return self.sign(canonical(payload))

    def recover_signer(self, message: str, signature: str) -> str:
        return recover_signer(message, signature)

    def verify_receipt(self, receipt: Any, signature: str) -> SignatureCheck:
        return _check(receipt, signature, self.address)

    def verify_owner_signature(self, payload: Any, signature: str, expected_owner: str) -> SignatureCheck:
        return verify_owner_signature(payload, signature, expected_owner)
