# app/utils/canonical.py
import json
import math
from typing import Any


def _normalize(value: Any) -> Any:
    """Copy a JSON-compatible value into the shape canonical() serializes."""
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("canonical JSON cannot represent NaN or Infinity")
        # 50.0 serializes as 50, the same bytes a JavaScript signer produces
        if value.is_integer() and abs(value) < 2 ** 53:
            return int(value)
    return value


def canonical(value: Any) -> str:
    """
    Deterministic JSON: keys sorted at every depth, arrays kept in order,
    no whitespace. The input is never mutated.

    This string is the exact message signed for receipts and verified for
    owner rights files.
    """
    return json.dumps(
        _normalize(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def canonical_json(text: str) -> str:
    """Parse a JSON document and return its canonical form."""
    return canonical(json.loads(text))
