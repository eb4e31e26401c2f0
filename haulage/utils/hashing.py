import hashlib
import json


def payload_hash(payload: dict) -> str:
    """Stable SHA-256 of a JSON-serialisable payload, used for cache keys."""
    s = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(s.encode()).hexdigest()
