"""
Authentication module for the quote service.
Bearer token verification and the request guard pipeline.
"""

from .verifier import Identity, TokenVerifier, FirebaseTokenVerifier, extract_bearer_token
from .guards import (
    Guard,
    GuardDecision,
    GuardPipeline,
    RequestContext,
    BearerTokenGuard,
    OwnershipGuard,
)

__all__ = [
    'Identity',
    'TokenVerifier',
    'FirebaseTokenVerifier',
    'extract_bearer_token',
    'Guard',
    'GuardDecision',
    'GuardPipeline',
    'RequestContext',
    'BearerTokenGuard',
    'OwnershipGuard',
]
