import hmac
from typing import Optional


class InvalidSecretError(Exception):
    """Raised when a webhook call carries a missing or wrong secret."""

    def __init__(self, reason: str = "Invalid secret"):
        super().__init__(reason)
        self.reason = reason


def secrets_match(supplied: Optional[str], configured: Optional[str]) -> bool:
    # Fails closed: no configured secret means nothing is ever authorized
    if not configured or supplied is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), configured.encode("utf-8"))
