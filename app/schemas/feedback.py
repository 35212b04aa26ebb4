from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class FeedbackCreate(BaseModel):
    source: str = Field(min_length=1, max_length=50)
    text: str = Field(min_length=1)


class Feedback(BaseModel):
    id: str
    source: str
    text: str
    created_at: datetime
    product_area: Optional[str] = None
    severity: Optional[str] = None  # P0..P3
    sentiment: Optional[str] = None
    status: str = "new"
    engaged_at: Optional[datetime] = None
    escalated_to: Optional[str] = None
    escalated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Triage(BaseModel):
    feedback_id: str
    ai_reason: Optional[str] = None
    draft_reply: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class FeedbackDetail(BaseModel):
    feedback: Feedback
    triage: Optional[Triage] = None


# ──────────── AI 分類結果 ────────────

class TriageResult(BaseModel):
    """Classification returned by the model, keys fixed by the prompt."""
    product_area: str
    severity: str
    sentiment: str
    ai_reason: Optional[str] = None
    draft_reply: Optional[str] = None


class TriageRunResponse(BaseModel):
    ok: bool = True
    triage: TriageResult


class OkResponse(BaseModel):
    ok: bool = True

