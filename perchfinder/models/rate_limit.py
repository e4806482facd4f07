# perchfinder/models/rate_limit.py
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class RateLimitCounter:
    """
    Firestore 'RateLimits' collection document.
    The document id is a salted, truncated hash of 'functionName:uid'.
    """
    count: int
    window_started_at_ms: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateLimitCounter":
        return cls(
            count=int(data.get('count') or 0),
            window_started_at_ms=int(data.get('windowStartedAtMs') or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self.count, 'windowStartedAtMs': self.window_started_at_ms}


@dataclass
class RateLimitDecision:
    allowed: bool
    count: int
    retry_after_seconds: int = 0
