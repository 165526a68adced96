"""
Issue and validate the bearer tokens that carry an actor across requests.

Tokens are HS256 JWTs with these claims:

    sub   identity id (24-char hex)
    role  Admin | Owner | Tenant
    iat   issued at
    nbf   not before (= iat)
    exp   iat + TTL (180 minutes by default)
    iss   issuer marker
    aud   audience marker

Validation fails closed: any problem with signature, lifetime, issuer,
audience, required claims or claim shape raises `InvalidToken`. Nothing is
read from a token before `jwt.decode` has verified it.

There is no revocation list. A token stays valid for its whole TTL even if the
account is deactivated afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import jwt

from estatehub.db.base import is_object_id
from estatehub.models.enums import Role
from estatehub.settings import Settings

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub", "role", "iat", "exp", "iss", "aud"]


class InvalidToken(Exception):
    """Raised when a token must not be trusted. Never carries the token itself."""


class TokenSubject(Protocol):
    id: str
    role: Role


@dataclass(frozen=True)
class TokenClaims:
    subject_id: str
    role: Role


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str
    issuer: str
    audience: str
    ttl: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenConfig:
        return cls(
            secret=settings.jwt_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            ttl=timedelta(minutes=settings.token_ttl_minutes),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Stateless token mint/verify.

    `clock` only affects issuance (iat/exp); validation always checks
    lifetime against the real current time.
    """

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] | None = None) -> None:
        self._config = config
        self._clock = clock or _utcnow

    @property
    def ttl(self) -> timedelta:
        return self._config.ttl

    def issue(self, subject: TokenSubject) -> IssuedToken:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._config.ttl
        payload: dict[str, Any] = {
            "sub": subject.id,
            "role": Role(subject.role).value,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": expires_at,
            "iss": self._config.issuer,
            "aud": self._config.audience,
        }
        token = jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidToken("Invalid token")

        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                issuer=self._config.issuer,
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iss": True,
                    "verify_aud": True,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise InvalidToken("Token expired") from e
        except jwt.InvalidIssuerError as e:
            logger.info("Token invalid issuer")
            raise InvalidToken("Invalid token: issuer") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise InvalidToken("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise InvalidToken("Invalid token") from e

        return _claims_from_payload(payload)


def _claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
    subject_id = payload.get("sub")
    if not is_object_id(subject_id):
        logger.info("Token subject has wrong shape")
        raise InvalidToken("Invalid token: subject")

    try:
        role = Role(payload.get("role"))
    except ValueError as e:
        logger.info("Token carries unknown role")
        raise InvalidToken("Invalid token: role") from e

    return TokenClaims(subject_id=subject_id.lower(), role=role)
