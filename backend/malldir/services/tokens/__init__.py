"""Token issuance and verification."""

from .dto import AccessClaims, RefreshClaims, TokenConfig, VerifiedIdentity
from .issuer import TokenIssuer
from .verifier import TokenVerifier, extract_bearer

__all__ = [
    "AccessClaims",
    "RefreshClaims",
    "TokenConfig",
    "TokenIssuer",
    "TokenVerifier",
    "VerifiedIdentity",
    "extract_bearer",
]
