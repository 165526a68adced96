from __future__ import annotations

import logging

from fastapi import Request

from estatehub.errors import Unauthenticated
from estatehub.security.context import Actor
from estatehub.security.tokens import InvalidToken, TokenService

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer"


def extract_bearer_token(request: Request) -> str | None:
    """
    Read `Authorization: Bearer <token>`.

    Returns None when the header is absent; raises Unauthenticated when it is
    present but malformed.
    """

    raw = request.headers.get(AUTHORIZATION_HEADER)
    if not raw:
        logger.info("Missing Authorization header path=%s method=%s", request.url.path, request.method)
        return None

    scheme, _, token = raw.partition(" ")
    if scheme.lower() != BEARER_PREFIX.lower():
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise Unauthenticated(f"Invalid {AUTHORIZATION_HEADER}. Expected '{BEARER_PREFIX} <token>'.")

    token = token.strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise Unauthenticated(f"Invalid {AUTHORIZATION_HEADER}. Missing token after '{BEARER_PREFIX}'.")

    return token


def authenticate(request: Request, tokens: TokenService) -> Actor:
    token = extract_bearer_token(request)
    if token is None:
        raise Unauthenticated("Authentication required")

    try:
        claims = tokens.validate(token)
    except InvalidToken as exc:
        logger.info("Rejected bearer token path=%s method=%s", request.url.path, request.method)
        raise Unauthenticated(str(exc)) from exc

    return Actor(id=claims.subject_id, role=claims.role)
