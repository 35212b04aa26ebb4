import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, func, Text
from sqlalchemy.orm import relationship
from app.db.base_class import Base

PRODUCT_AREAS = ["Auth", "Billing", "DNS", "Workers", "R2", "WAF", "Performance", "Docs", "Other"]
SEVERITIES = ["P0", "P1", "P2", "P3"]
SENTIMENTS = ["positive", "neutral", "negative"]
STATUSES = ["new", "triaged", "acknowledged", "watching", "assigned", "escalated", "resolved"]


def _new_id() -> str:
    return str(uuid.uuid4())


class Feedback(Base):
    """單筆回饋：來源、原文，以及分類與處理狀態"""
    __tablename__ = "feedback"

    id = Column(String(36), primary_key=True, default=_new_id)
    source = Column(String(50), nullable=False)  # support / twitter / github / discord / ...
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    # 由 AI triage 寫入
    product_area = Column(String(50), nullable=True)
    severity = Column(String(2), nullable=True)  # P0..P3
    sentiment = Column(String(20), nullable=True)

    status = Column(String(20), nullable=False, default="new", server_default="new")
    engaged_at = Column(DateTime(timezone=True), nullable=True)
    escalated_to = Column(Text, nullable=True)
    escalated_at = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    triage = relationship("Triage", uselist=False, back_populates="feedback")


class Triage(Base):
    """AI 分類理由與草擬回覆（每筆 feedback 至多一筆）"""
    __tablename__ = "triage"

    feedback_id = Column(String(36), ForeignKey("feedback.id"), primary_key=True)
    ai_reason = Column(Text, nullable=True)
    draft_reply = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    feedback = relationship("Feedback", back_populates="triage")
