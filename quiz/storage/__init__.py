"""Quiz Storage - MongoDB (servidor) e session storage (cliente)."""

from .quiz_store import QuizStore
from .session_storage import QUIZ_RESULTS_KEY, USER_EMAIL_KEY, SessionStorage

__all__ = ["QuizStore", "SessionStorage", "USER_EMAIL_KEY", "QUIZ_RESULTS_KEY"]
