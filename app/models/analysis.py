from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import Base, JSONType
from app.models.document import _new_id, _utcnow


class DocumentAnalysis(Base):
    __tablename__ = "document_analyses"
    __table_args__ = (
        CheckConstraint("compliance_score >= 0 AND compliance_score <= 100", name="ck_compliance_score_range"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    document_id = Column(String(36), ForeignKey('documents.id', ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    opportunities = Column(JSONType, nullable=False, default=list)
    risks = Column(JSONType, nullable=False, default=list)
    recommendations = Column(JSONType, nullable=False, default=list)
    carbon_impact = Column(JSONType, nullable=False, default=dict)
    compliance_score = Column(Integer, nullable=False, default=0)
    ai_summary = Column(Text, nullable=False, default="")
    # Firma: signed_at y signature_data se escriben juntos, una sola vez
    signed_at = Column(DateTime(timezone=True), nullable=True)
    signature_data = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    document = relationship("Document", back_populates="analyses")
