"""
OTP Model
One pending login challenge per phone number.
"""

from sqlalchemy import Column, DateTime, String
from supplier_auth.models.common import CommonModel


class OneTimeCode(CommonModel):
    """
    Pending OTP keyed by phone. The code itself is never stored, only its
    SHA-256 digest.
    """
    __tablename__ = "otp_codes"

    phone = Column(String(20), primary_key=True)
    otp_hash = Column(String(64), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<OneTimeCode(phone={self.phone}, expires_at={self.expires_at})>"
