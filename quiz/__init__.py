"""Quiz Module - Quiz de trivia com relatorio de desempenho.

Arquitetura:
- models/: Enums, Schemas Pydantic, QuizSession
- engine/: QuizScoringEngine, QuizSessionController
- sources/: OpenTriviaClient (banco de questoes externo)
- storage/: QuizStore (MongoDB), SessionStorage (cliente)
- client.py: QuizApiClient (httpx)
- router.py: FastAPI endpoints
- cli.py: wizard de terminal (email -> quiz -> relatorio)
"""

from .client import QuizApiClient
from .engine import QuizScoringEngine, QuizSessionController
from .models import QuizDifficulty, QuizSession, QuestionResult, SessionStatus, TriviaQuestion
from .sources import OpenTriviaClient
from .storage import QuizStore, SessionStorage

__all__ = [
    # Models
    "QuizDifficulty",
    "SessionStatus",
    "TriviaQuestion",
    "QuestionResult",
    "QuizSession",
    # Engines
    "QuizScoringEngine",
    "QuizSessionController",
    # Sources
    "OpenTriviaClient",
    # Storage
    "QuizStore",
    "SessionStorage",
    # Client
    "QuizApiClient",
]
