"""
Identity for stateless requests: token mint/verify, credential verifier, and
the FastAPI dependencies that turn a bearer header into an `Actor`.
"""

from .context import Actor
from .tokens import InvalidToken, IssuedToken, TokenClaims, TokenConfig, TokenService

__all__ = [
    "Actor",
    "InvalidToken",
    "IssuedToken",
    "TokenClaims",
    "TokenConfig",
    "TokenService",
]
