from __future__ import annotations

from fastapi import Depends, Request

from estatehub.errors import Unauthenticated
from estatehub.policy import ScopingPolicy
from estatehub.security.auth import authenticate
from estatehub.security.context import Actor
from estatehub.security.tokens import TokenService


def get_policy(request: Request) -> ScopingPolicy:
    policy = getattr(request.app.state, "policy", None)
    if policy is None:
        raise RuntimeError("Scoping policy not loaded. Did app startup run?")
    return policy


def get_token_service(request: Request) -> TokenService:
    tokens = getattr(request.app.state, "token_service", None)
    if tokens is None:
        raise RuntimeError("Token service not configured. Did app startup run?")
    return tokens


def get_actor(request: Request) -> Actor:
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise Unauthenticated("Authentication required")
    return actor


def enforce_authentication(
    request: Request,
    policy: ScopingPolicy = Depends(get_policy),
    tokens: TokenService = Depends(get_token_service),
) -> None:
    """
    Global dependency applied to every route.

    Public routes (from the rule table) pass through untouched. Everything
    else needs a valid bearer token; the resulting Actor is attached to
    `request.state.actor`. No per-request state survives the request.
    """

    if policy.is_public(request.method, request.url.path):
        return

    request.state.actor = authenticate(request, tokens)
