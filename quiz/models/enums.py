"""Quiz Enums - Dificuldade, estado da sessao e status de navegacao."""

from enum import Enum


class QuizDifficulty(str, Enum):
    """Niveis de dificuldade reportados pelo Open Trivia DB."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Formato da pergunta no banco de questoes."""

    MULTIPLE = "multiple"  # 4 alternativas
    BOOLEAN = "boolean"  # True / False


class SessionStatus(str, Enum):
    """Estados da sessao de quiz no cliente."""

    LOADING = "loading"
    ACTIVE = "active"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"  # terminal
    ERROR = "error"  # falha ao carregar perguntas


class QuestionStatus(str, Enum):
    """Status de uma pergunta no grid de navegacao."""

    ATTEMPTED = "attempted"
    VISITED = "visited"
    NOT_VISITED = "not-visited"
