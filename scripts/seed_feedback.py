"""Load the mock feedback items into an empty database.

用法:
  python scripts/seed_feedback.py           # 只在 feedback 表為空時寫入
  python scripts/seed_feedback.py --force   # 無論如何都寫入
"""
import argparse
import logging

from app.crud import crud_feedback
from app.db.session import SessionLocal

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed(force: bool = False) -> None:
    db = SessionLocal()
    try:
        existing = crud_feedback.list_feedback(db)
        if existing and not force:
            logger.info("feedback already has %d rows, skipping (use --force)", len(existing))
            return
        crud_feedback.seed_feedback(db)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--force", action="store_true", help="seed even if rows exist")
    args = parser.parse_args()
    seed(force=args.force)
