# portal_chat/models/base.py
from sqlalchemy.orm import as_declarative, Mapped, mapped_column
from sqlalchemy import DateTime, Uuid, func
import uuid


@as_declarative()
class Base:
    """Common columns; every chat table names itself via __tablename__"""
    __abstract__ = True

    # Native UUID on PostgreSQL, CHAR(32) on SQLite
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    created_at = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
