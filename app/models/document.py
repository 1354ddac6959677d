import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, BigInteger, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    file_name = Column(Text, nullable=False)
    file_path = Column(Text, nullable=True)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(255), nullable=True)
    # pending -> processing -> analyzed | error
    status = Column(String(50), default='pending', nullable=False)
    extracted_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    analyses = relationship(
        "DocumentAnalysis",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
