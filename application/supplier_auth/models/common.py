from sqlalchemy import Column, DateTime
from supplier_auth.connections.database import Base
from supplier_auth.utils.datetime_helpers import get_utc_now


class CommonModel(Base):
    """Base model with common fields for all models"""
    __abstract__ = True

    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)
