from sqlalchemy import Column, Integer, DateTime, func
from task_service.db.database import Base


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), default=func.now(), nullable=False)


class IDMixin:
    """Mixin for the internal integer ID"""
    id = Column(Integer, primary_key=True, index=True)
