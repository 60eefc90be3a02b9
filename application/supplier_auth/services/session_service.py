"""
Session gate

Every protected request is admitted through ``authenticate``. Revocation is
logical: a per-user watermark invalidates every token issued before it (less a
grace tolerance), and logged-out tokens are refused through the blacklist.
"""
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from supplier_auth.core.errors import AuthServiceError, InvalidToken, Revoked, Unauthenticated, UserNotFound
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.models.users import User
from supplier_auth.repository.users import UserRepository
from supplier_auth.services.token_blacklist import TokenBlacklist
from supplier_auth.services.token_service import TokenService
from supplier_auth.utils.datetime_helpers import Clock, as_utc, get_utc_now, to_epoch_seconds

logger = get_app_logger("supplier_auth.session_service")


class SessionService:

    def __init__(self, user_repository: UserRepository, token_service: TokenService,
                 blacklist: TokenBlacklist, clock: Clock = get_utc_now,
                 revocation_grace_seconds: int = 60):
        self.users = user_repository
        self.tokens = token_service
        self.blacklist = blacklist
        self.clock = clock
        self.revocation_grace = timedelta(seconds=revocation_grace_seconds)

    def _is_revoked_by_watermark(self, user: User, issued_at) -> bool:
        watermark = as_utc(user.last_token_issued)
        if watermark is None:
            return False
        # iat has whole-second precision, compare on the same scale
        return to_epoch_seconds(issued_at) < to_epoch_seconds(watermark - self.revocation_grace)

    def authenticate(self, token: Optional[str]) -> User:
        """
        Resolve the user behind a bearer token.

        Raises:
            Unauthenticated: no token
            Revoked: token blacklisted, or issued before the user's watermark less the grace
            InvalidToken: bad signature, shape or claims
            TokenExpired: past ``exp`` on the service clock
            UserNotFound: ``userId`` no longer resolves
        """
        if not token:
            raise Unauthenticated()

        if self.blacklist.contains(token):
            logger.info(f"token_blacklisted | token_prefix={token[:10]}")
            raise Revoked()

        claims = self.tokens.decode(token, self.clock())

        user = self.users.get_by_id(claims.user_id)
        if user is None:
            raise UserNotFound()

        if self._is_revoked_by_watermark(user, claims.issued_at):
            logger.info(f"token_revoked_by_watermark | user_id={user.id} token_prefix={token[:10]}")
            raise Revoked()

        return user

    def authenticate_optional(self, token: Optional[str]) -> Optional[User]:
        try:
            return self.authenticate(token)
        except AuthServiceError:
            return None

    def logout(self, token: Optional[str]):
        """
        Blacklist the token and, when it is attributable, advance the owner's watermark.
        A database failure on the watermark is logged and the blacklist entry stands.
        """
        if not token:
            return

        self.blacklist.add(token)

        try:
            claims = self.tokens.decode_ignoring_expiry(token)
        except InvalidToken:
            logger.info(f"logout_unattributable_token | token_prefix={token[:10]}")
            return

        try:
            if self.users.get_by_id(claims.user_id) is None:
                return
            self.users.advance_watermark(claims.user_id, self.clock())
        except SQLAlchemyError as e:
            logger.error(f"logout_watermark_error | user_id={claims.user_id} error={e}", exc_info=True)
            return
        logger.info(f"logout | user_id={claims.user_id}")
