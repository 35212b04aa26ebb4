from app.db.base_class import Base
from app.models.feedback import Feedback, Triage
