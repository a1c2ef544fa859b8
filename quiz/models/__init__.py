"""Quiz Models - Enums, Schemas e State."""

from .enums import QuestionStatus, QuestionType, QuizDifficulty, SessionStatus
from .schemas import (
    ErrorResponse,
    HealthResponse,
    LatestQuizEnvelope,
    QuestionResult,
    QuizReport,
    QuizResponseRecord,
    QuizResponsesEnvelope,
    SubmitEmailRequest,
    SubmitEmailResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
    TriviaQuestion,
    UserRecord,
    is_valid_email,
    normalize_email,
)
from .state import QuizSession

__all__ = [
    # Enums
    "QuizDifficulty",
    "QuestionType",
    "SessionStatus",
    "QuestionStatus",
    # Schemas
    "TriviaQuestion",
    "QuestionResult",
    "UserRecord",
    "QuizResponseRecord",
    "SubmitEmailRequest",
    "SubmitEmailResponse",
    "SubmitQuizRequest",
    "SubmitQuizResponse",
    "QuizResponsesEnvelope",
    "LatestQuizEnvelope",
    "HealthResponse",
    "ErrorResponse",
    "QuizReport",
    "normalize_email",
    "is_valid_email",
    # State
    "QuizSession",
]
