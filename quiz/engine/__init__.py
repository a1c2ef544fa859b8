"""Quiz Engines - Correcao e controle da sessao."""

from .scoring_engine import GradedQuiz, QuizScoringEngine
from .session_controller import MissingEmailError, QuizSessionController

__all__ = ["QuizScoringEngine", "GradedQuiz", "QuizSessionController", "MissingEmailError"]
