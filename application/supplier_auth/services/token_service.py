"""
Session token authority.

Tokens are HS256 JWTs carrying ``userId``, ``iat``, ``exp`` and optionally
``device``. Expiry is checked against the service clock rather than the
library's wall clock so it can be driven from tests.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt

from supplier_auth.core.errors import InvalidToken, TokenExpired
from supplier_auth.utils.datetime_helpers import from_epoch_seconds, to_epoch_seconds

REQUIRED_CLAIMS = ["userId", "iat", "exp"]


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    issued_at: datetime
    expires_at: datetime
    device: Optional[str] = None


class TokenService:

    def __init__(self, secret: str, algorithm: str = "HS256", default_lifetime: timedelta = timedelta(days=7)):
        self.secret = secret
        self.algorithm = algorithm
        self.default_lifetime = default_lifetime

    def issue(self, user_id: str, now: datetime, device: Optional[str] = None,
              lifetime: Optional[timedelta] = None) -> str:
        """
        Mint a token issued at ``now``.

        Args:
            user_id: subject, stored as the ``userId`` claim
            now: issuance instant, the same value written to the user's watermark
            device: client descriptor recorded at login
            lifetime: overrides the default 7 day lifetime
        """
        payload = {
            "userId": str(user_id),
            "iat": to_epoch_seconds(now),
            "exp": to_epoch_seconds(now + (lifetime or self.default_lifetime)),
        }
        if device:
            payload["device"] = device
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def _decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
            )
        except jwt.InvalidTokenError:
            raise InvalidToken()

        user_id = payload.get("userId")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        if isinstance(iat, bool) or not isinstance(iat, (int, float)):
            raise InvalidToken()
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidToken()

        device = payload.get("device")
        return TokenClaims(
            user_id=user_id,
            issued_at=from_epoch_seconds(iat),
            expires_at=from_epoch_seconds(exp),
            device=device if isinstance(device, str) else None,
        )

    def decode(self, token: str, now: datetime) -> TokenClaims:
        """Verify signature and claims; raises InvalidToken or TokenExpired."""
        claims = self._decode(token)
        if now >= claims.expires_at:
            raise TokenExpired()
        return claims

    def decode_ignoring_expiry(self, token: str) -> TokenClaims:
        """Signature-checked decode used by logout, where an expired token is still attributable."""
        return self._decode(token)
