"""
OTP Repository

Handles database operations for pending one-time codes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import sessionmaker

from supplier_auth.connections.database import get_db_session
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.models.otp import OneTimeCode

logger = get_app_logger("supplier_auth.otp_repository")

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class OTPRepository:
    """Repository for OTP operations"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def upsert(self, phone: str, otp_hash: str, expires_at: datetime, now: datetime):
        """
        Store the code for a phone, replacing any previous one in a single
        keyed write so a concurrent verify never sees an empty gap.
        """
        with get_db_session(self.session_factory) as db:
            insert_fn = _UPSERT_DIALECTS.get(db.bind.dialect.name)
            if insert_fn is None:
                db.merge(OneTimeCode(phone=phone, otp_hash=otp_hash, expires_at=expires_at,
                                     created_at=now, updated_at=now))
            else:
                stmt = insert_fn(OneTimeCode).values(
                    phone=phone, otp_hash=otp_hash, expires_at=expires_at,
                    created_at=now, updated_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[OneTimeCode.phone],
                    set_={"otp_hash": otp_hash, "expires_at": expires_at, "updated_at": now},
                )
                db.execute(stmt)
        logger.info(f"otp_upserted | phone={phone} expires_at={expires_at.isoformat()}")

    def find(self, phone: str, otp_hash: str) -> Optional[OneTimeCode]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return db.execute(
                select(OneTimeCode).where(OneTimeCode.phone == phone, OneTimeCode.otp_hash == otp_hash)
            ).scalar_one_or_none()

    def consume(self, phone: str, otp_hash: str) -> bool:
        """Delete the matching code; False when another request already consumed it."""
        with get_db_session(self.session_factory) as db:
            result = db.execute(
                delete(OneTimeCode).where(OneTimeCode.phone == phone, OneTimeCode.otp_hash == otp_hash)
            )
            return result.rowcount == 1

    def delete_expired(self, now: datetime) -> int:
        with get_db_session(self.session_factory) as db:
            result = db.execute(delete(OneTimeCode).where(OneTimeCode.expires_at < now))
            removed = result.rowcount or 0
        logger.info(f"otp_expired_deleted | count={removed}")
        return removed
