# app/models/knowledge_base.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import Base
from app.models.document import _utcnow

class KBCategory(Base):
    __tablename__ = 'kb_categories'

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)

    items = relationship("KBItem", back_populates="category")

class KBItem(Base):
    __tablename__ = 'kb_items'

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey('kb_categories.id', ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    category = relationship("KBCategory", back_populates="items")
