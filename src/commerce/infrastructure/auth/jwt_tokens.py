"""PyJWT implementation of TokenService (HS256, shared secret)."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import jwt

from commerce.domain.exceptions import AuthenticationError
from commerce.domain.service.credentials import TokenClaims, TokenService

ALGORITHM = "HS256"

_DURATION = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_duration(value: str) -> timedelta:
    """Parse ``7d`` / ``12h`` / ``15m`` / ``30s`` / ``3600`` into a timedelta."""
    match = _DURATION.match(value.lower())
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])


class JwtTokenService(TokenService):

    def __init__(self, secret: str, expires_in: str = "7d") -> None:
        self._secret = secret
        self._expires_in = expires_in
        self._lifetime = parse_duration(expires_in)

    @property
    def expires_in(self) -> str:
        return self._expires_in

    def issue(self, claims: TokenClaims) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": claims.user_id,
            "email": claims.email,
            "role": claims.role,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        try:
            return TokenClaims(
                user_id=str(payload["userId"]),
                email=str(payload["email"]),
                role=str(payload["role"]),
            )
        except KeyError:
            raise AuthenticationError("Invalid token")
