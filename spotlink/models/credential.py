"""Bearer credential model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Credential:
    """A bearer token and the moment it stops being valid.

    Instances are immutable so a holder can swap one for another in a
    single assignment; readers never see a token paired with the wrong
    expiry.
    """

    access_token: str
    expires_at_ms: int  # epoch milliseconds

    @classmethod
    def from_lifetime(cls, access_token: str, expires_in: float, now: float) -> "Credential":
        """Build a credential from a server-reported lifetime in seconds."""
        return cls(access_token=access_token, expires_at_ms=int((now + expires_in) * 1000))

    @property
    def authorization(self) -> str:
        """Value for the Authorization header."""
        return f"Bearer {self.access_token}"

    def is_expired(self, now: float) -> bool:
        """Check expiry against an epoch timestamp in seconds."""
        return now * 1000 >= self.expires_at_ms

    def seconds_remaining(self, now: float) -> float:
        return self.expires_at_ms / 1000 - now
