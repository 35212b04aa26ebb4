from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api import deps
from app.api.errors import APIError
from app.crud import crud_feedback
from app.logging_config import feedback_id_ctx
from app.middleware.metrics import TRIAGE_COUNT
from app.models.feedback import STATUSES
from app.schemas.feedback import (
    Feedback,
    FeedbackCreate,
    FeedbackDetail,
    OkResponse,
    TriageRunResponse,
)
from app.services.triage_classifier import FeedbackClassifier

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_id(id: Optional[str]) -> str:
    if not id:
        raise APIError(400, "missing_id")
    feedback_id_ctx.set(id)
    return id


# ──────────── Demo helpers ────────────

@router.post("/seed", response_model=OkResponse)
def seed(db: Session = Depends(deps.get_db)) -> Any:
    """Insert the four mock feedback items."""
    crud_feedback.seed_feedback(db)
    return {"ok": True}


@router.post("/clear", response_model=OkResponse)
def clear(db: Session = Depends(deps.get_db)) -> Any:
    """Delete every triage and feedback row."""
    crud_feedback.clear_all(db)
    return {"ok": True}


# ──────────── Feedback ────────────

@router.get("/feedback", response_model=List[Feedback])
def list_feedback(db: Session = Depends(deps.get_db)) -> Any:
    return crud_feedback.list_feedback(db)


@router.post("/feedback", response_model=Feedback)
def ingest_feedback(
    *,
    db: Session = Depends(deps.get_db),
    feedback_in: FeedbackCreate,
) -> Any:
    """Store a single inbound feedback item (status "new")."""
    fb = crud_feedback.create_feedback(db, source=feedback_in.source, text=feedback_in.text)
    logger.info("Ingested feedback %s from %s", fb.id, fb.source)
    return fb


@router.get("/detail", response_model=FeedbackDetail)
def detail(
    id: Optional[str] = Query(None),
    db: Session = Depends(deps.get_db),
) -> Any:
    feedback_id = _require_id(id)
    fb = crud_feedback.get_feedback(db, feedback_id)
    if not fb:
        raise APIError(404, "not_found")
    return {"feedback": fb, "triage": crud_feedback.get_triage(db, feedback_id)}


# ──────────── AI triage ────────────

@router.post("/triage", response_model=TriageRunResponse)
async def run_triage(
    id: Optional[str] = Query(None),
    db: Session = Depends(deps.get_db),
    classifier: FeedbackClassifier = Depends(deps.get_classifier),
) -> Any:
    """Classify one feedback item and store the result."""
    feedback_id = _require_id(id)
    fb = crud_feedback.get_feedback(db, feedback_id)
    if not fb:
        raise APIError(404, "not_found")

    result = await classifier.classify(fb.text)
    crud_feedback.apply_triage(db, fb, result)
    TRIAGE_COUNT.labels(outcome="ok").inc()
    logger.info(
        "Triaged %s: area=%s severity=%s sentiment=%s",
        feedback_id, result.product_area, result.severity, result.sentiment,
    )
    return {"ok": True, "triage": result}


# ──────────── Status / lifecycle ────────────

@router.post("/status", response_model=OkResponse)
def set_status(
    id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(deps.get_db),
) -> Any:
    if not id or not status:
        raise APIError(400, "missing_params")
    feedback_id_ctx.set(id)
    if status not in STATUSES:
        raise APIError(400, "invalid_status")

    crud_feedback.set_status(db, id, status)
    logger.info("Status of %s set to %s", id, status)
    return {"ok": True}


@router.post("/escalate", response_model=OkResponse)
def escalate(
    id: Optional[str] = Query(None),
    to: Optional[str] = Query(None),
    db: Session = Depends(deps.get_db),
) -> Any:
    feedback_id = _require_id(id)
    target = to or "Unknown"
    crud_feedback.escalate(db, feedback_id, target)
    logger.info("Escalated %s to %s", feedback_id, target)
    return {"ok": True}


@router.post("/resolve", response_model=OkResponse)
def resolve(
    id: Optional[str] = Query(None),
    db: Session = Depends(deps.get_db),
) -> Any:
    feedback_id = _require_id(id)
    crud_feedback.resolve(db, feedback_id)
    logger.info("Resolved %s", feedback_id)
    return {"ok": True}
