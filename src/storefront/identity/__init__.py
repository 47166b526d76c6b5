"""Token verifier registry.

Uses the HMAC-signed verifier configured from the environment unless
another verifier has been installed with ``set_verifier``.
"""

from storefront.identity.port import CurrentUser, InvalidToken, TokenVerifier

_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier
    if _verifier is None:
        from storefront.identity.signed_token import SignedTokenVerifier

        _verifier = SignedTokenVerifier.from_env()
    return _verifier


def set_verifier(verifier: TokenVerifier) -> None:
    global _verifier
    _verifier = verifier


def reset_verifier() -> None:
    global _verifier
    _verifier = None


__all__ = ["CurrentUser", "InvalidToken", "TokenVerifier", "get_verifier", "reset_verifier", "set_verifier"]
