"""CRUD-level tests for the triage upsert."""
from app.crud import crud_feedback
from app.models.feedback import Triage
from app.schemas.feedback import TriageResult


def _result(reason: str) -> TriageResult:
    return TriageResult(product_area="DNS", severity="P2", sentiment="neutral", ai_reason=reason, draft_reply="Hi")


def test_apply_triage_inserts_then_updates_in_place(db):
    fb = crud_feedback.create_feedback(db, source="support", text="DNS is slow")

    first = crud_feedback.apply_triage(db, fb, _result("first"))
    assert first.ai_reason == "first"

    second = crud_feedback.apply_triage(db, fb, _result("second"))
    assert second.ai_reason == "second"
    assert db.query(Triage).filter(Triage.feedback_id == fb.id).count() == 1
    assert fb.status == "triaged"


def test_apply_triage_over_row_written_by_another_session(db, test_session_factory):
    fb = crud_feedback.create_feedback(db, source="support", text="DNS is slow")

    other = test_session_factory()
    try:
        other.add(Triage(feedback_id=fb.id, ai_reason="from elsewhere", updated_at=crud_feedback._now()))
        other.commit()
    finally:
        other.close()

    triage = crud_feedback.apply_triage(db, fb, _result("mine"))

    assert triage.ai_reason == "mine"
    assert db.query(Triage).count() == 1
