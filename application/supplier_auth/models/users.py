"""
User Model
Onboarding account keyed by canonical phone number.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from supplier_auth.models.common import CommonModel


class User(CommonModel):
    """
    Attributes:
        phone: canonical phone ("+" and digits), unique join key for OTPs and sessions
        is_verified: set on the first successful OTP verification
        last_token_issued: revocation watermark, tokens issued before it (minus grace) are invalid
        supplier_id: link to the supplier profile, null until one is created
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    phone = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    device_info = Column(String(512), nullable=False, default="")
    last_token_issued = Column(DateTime(timezone=True), nullable=True)

    company_name = Column(String(255), nullable=False, default="")
    contact_person = Column(String(255), nullable=False, default="")
    profile_completed = Column(Boolean, nullable=False, default=False)
    supplier_id = Column(String(36), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, phone={self.phone}, verified={self.is_verified})>"
