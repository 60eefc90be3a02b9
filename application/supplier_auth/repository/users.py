"""
User Repository

Handles database operations for onboarding accounts.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from supplier_auth.connections.database import get_db_session
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.models.users import User

logger = get_app_logger("supplier_auth.user_repository")


class UserRepository:
    """Repository for user operations"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return db.get(User, user_id)

    def get_by_phone(self, phone: str) -> Optional[User]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return db.execute(select(User).where(User.phone == phone)).scalar_one_or_none()

    def get_or_create_by_phone(self, phone: str) -> User:
        """
        Return the account for a phone, creating it on first login.

        Two verifications racing for a brand new phone both try the insert;
        the loser hits the unique index and re-reads the winner's row.
        """
        user = self.get_by_phone(phone)
        if user:
            return user

        try:
            with get_db_session(self.session_factory) as db:
                user = User(phone=phone)
                db.add(user)
                db.flush()
            logger.info(f"user_created | user_id={user.id} phone={phone}")
            return user
        except IntegrityError:
            logger.info(f"user_create_conflict | phone={phone}")
            user = self.get_by_phone(phone)
            if user is None:
                raise
            return user

    def mark_login(self, user_id: str, now: datetime, device_info: str) -> Optional[User]:
        """Record a successful login and move the revocation watermark to ``now``."""
        with get_db_session(self.session_factory) as db:
            user = db.get(User, user_id)
            if user is None:
                return None
            user.is_verified = True
            user.last_login = now
            user.device_info = device_info or ""
            user.last_token_issued = now
            user.updated_at = now
            db.flush()
            return user

    def advance_watermark(self, user_id: str, now: datetime) -> bool:
        with get_db_session(self.session_factory) as db:
            result = db.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_token_issued=now, updated_at=now)
            )
            advanced = result.rowcount == 1
        logger.info(f"watermark_advanced | user_id={user_id} advanced={advanced}")
        return advanced
