from typing import Generator

from app.db.session import SessionLocal
from app.services.triage_classifier import FeedbackClassifier, OpenAIFeedbackClassifier


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_classifier() -> FeedbackClassifier:
    return OpenAIFeedbackClassifier()
