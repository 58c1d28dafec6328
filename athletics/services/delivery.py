from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DeliveryOutcome:
    """
    Result of one email or push delivery attempt.

    token_invalid marks a push subscription the push service will never
    accept again (404/410); the subscription itself should be removed.
    """
    delivered: bool
    error: Optional[str] = None
    token_invalid: bool = False

    @classmethod
    def ok(cls) -> "DeliveryOutcome":
        return cls(delivered=True)

    @classmethod
    def failed(cls, error: str, token_invalid: bool = False) -> "DeliveryOutcome":
        return cls(delivered=False, error=error, token_invalid=token_invalid)
