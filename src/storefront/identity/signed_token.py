"""HMAC-signed bearer tokens in the JWT compact layout (header.payload.sig).

Used by the API in development and tests; production deployments may plug
in a verifier for their identity provider instead.
"""

import base64
import hashlib
import hmac
import json
import os
import time

from storefront.identity.port import CurrentUser, InvalidToken, TokenVerifier

DEFAULT_TTL_SECONDS = 30 * 24 * 60 * 60


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


class SignedTokenVerifier(TokenVerifier):
    def __init__(self, secret: str, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        if not secret:
            raise ValueError("A token secret is required")
        self._secret = secret.encode()
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_env(cls) -> "SignedTokenVerifier":
        return cls(
            secret=os.getenv("STOREFRONT_TOKEN_SECRET", "storefront-dev-secret"),
            ttl_seconds=int(os.getenv("STOREFRONT_TOKEN_TTL", str(DEFAULT_TTL_SECONDS))),
        )

    def _sign(self, signing_input: str) -> str:
        return hmac.new(self._secret, signing_input.encode(), hashlib.sha256).hexdigest()

    def issue(self, user: CurrentUser, now: float | None = None) -> str:
        now = time.time() if now is None else now
        header = _b64encode(json.dumps({"alg": "HS256", "typ": "JWT"}).encode())
        payload = _b64encode(
            json.dumps(
                {
                    "sub": user.user_id,
                    "email": user.email,
                    "name": user.name,
                    "admin": user.is_admin,
                    "exp": int(now) + self.ttl_seconds,
                }
            ).encode()
        )
        return f"{header}.{payload}.{self._sign(f'{header}.{payload}')}"

    def verify(self, token: str) -> CurrentUser:
        parts = (token or "").split(".")
        if len(parts) != 3:
            raise InvalidToken("Malformed token")

        header, payload, signature = parts
        if not hmac.compare_digest(signature, self._sign(f"{header}.{payload}")):
            raise InvalidToken("Bad token signature")

        try:
            claims = json.loads(_b64decode(payload))
        except (ValueError, UnicodeDecodeError):
            raise InvalidToken("Unreadable token payload") from None

        if claims.get("exp", 0) < time.time():
            raise InvalidToken("Token expired")
        if not claims.get("sub"):
            raise InvalidToken("Token has no subject")

        return CurrentUser(
            user_id=str(claims["sub"]),
            email=claims.get("email"),
            name=claims.get("name"),
            is_admin=bool(claims.get("admin", False)),
        )
