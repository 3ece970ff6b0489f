"""Authenticated caller, passed explicitly into every core operation."""

from dataclasses import dataclass


def normalize_identity(value: str) -> str:
    """Counterparty identities are emails: compared trimmed and case-insensitively."""
    return value.strip().lower()


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str  # counterparty identity matched against sender/recipient identity

    @property
    def identity(self) -> str:
        return normalize_identity(self.email)
