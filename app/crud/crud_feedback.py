import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from app.models.feedback import Feedback, Triage
from app.schemas.feedback import TriageResult

logger = logging.getLogger(__name__)

MOCK_FEEDBACK = [
    {"source": "support", "text": "Workers deployment fails with a cryptic error. I can’t launch my app."},
    {"source": "twitter", "text": "Billing is confusing — I got charged twice and there’s no clear invoice view."},
    {"source": "github", "text": "Docs for D1 migrations don’t explain local vs remote clearly."},
    {"source": "discord", "text": "DNS changes are taking forever to propagate for my domain."},
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def list_feedback(db: Session) -> List[Feedback]:
    return db.query(Feedback).order_by(Feedback.created_at.desc()).all()


def get_feedback(db: Session, feedback_id: str) -> Optional[Feedback]:
    return db.query(Feedback).filter(Feedback.id == feedback_id).first()


def get_triage(db: Session, feedback_id: str) -> Optional[Triage]:
    return db.query(Triage).filter(Triage.feedback_id == feedback_id).first()


def create_feedback(db: Session, *, source: str, text: str) -> Feedback:
    db_obj = Feedback(source=source, text=text, created_at=_now())
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def seed_feedback(db: Session) -> List[Feedback]:
    """Insert the fixed mock items, all sharing one created_at."""
    now = _now()
    rows = [Feedback(source=it["source"], text=it["text"], created_at=now) for it in MOCK_FEEDBACK]
    db.add_all(rows)
    db.commit()
    logger.info("Seeded %d mock feedback items", len(rows))
    return rows


def clear_all(db: Session) -> None:
    # triage first: it references feedback
    triage_count = db.query(Triage).delete()
    feedback_count = db.query(Feedback).delete()
    db.commit()
    logger.info("Cleared %d feedback and %d triage rows", feedback_count, triage_count)


def _insert_for(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


def apply_triage(db: Session, feedback: Feedback, result: TriageResult) -> Triage:
    """Write the classification onto the feedback row and upsert its triage row.

    The triage row is written with one INSERT ... ON CONFLICT DO UPDATE
    keyed on feedback_id; concurrent triages of one item leave one row.
    """
    feedback.product_area = result.product_area
    feedback.severity = result.severity
    feedback.sentiment = result.sentiment
    feedback.status = "triaged"

    stmt = _insert_for(db)(Triage).values(
        feedback_id=feedback.id,
        ai_reason=result.ai_reason,
        draft_reply=result.draft_reply,
        updated_at=_now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Triage.feedback_id],
        set_={
            "ai_reason": stmt.excluded.ai_reason,
            "draft_reply": stmt.excluded.draft_reply,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    db.execute(stmt)
    db.commit()

    triage = get_triage(db, feedback.id)
    db.refresh(triage)
    return triage


# ──────────── 狀態變更（不檢查前一狀態） ────────────

def _update(db: Session, feedback_id: str, **values) -> int:
    count = db.query(Feedback).filter(Feedback.id == feedback_id).update(
        values, synchronize_session=False
    )
    db.commit()
    if not count:
        logger.info("No feedback row %s to update", feedback_id)
    return count


def set_status(db: Session, feedback_id: str, status: str) -> int:
    return _update(db, feedback_id, status=status, engaged_at=_now())


def escalate(db: Session, feedback_id: str, to: str) -> int:
    return _update(db, feedback_id, status="escalated", escalated_to=to, escalated_at=_now())


def resolve(db: Session, feedback_id: str) -> int:
    return _update(db, feedback_id, status="resolved", resolved_at=_now())
