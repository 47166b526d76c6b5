"""Identity port: who is calling, as far as the storefront cares.

The identity service itself (accounts, passwords, login forms) lives
elsewhere; the storefront only ever verifies a bearer token and receives a
CurrentUser back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    email: str | None = None
    name: str | None = None
    is_admin: bool = False


class InvalidToken(Exception):
    """The token is malformed, tampered with or expired."""


class TokenVerifier(ABC):
    @abstractmethod
    def verify(self, token: str) -> CurrentUser:
        """Return the user the token was issued to, or raise InvalidToken."""
        ...
