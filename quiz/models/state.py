"""Quiz State - Maquina de estados da sessao de quiz no cliente."""

import math
import time
from dataclasses import dataclass, field

from ..exceptions import InvalidTransitionError, QuizSessionError
from .enums import QuestionStatus, SessionStatus
from .schemas import TriviaQuestion

# Limiares do cronometro (segundos restantes)
WARNING_SECONDS = 5 * 60
CRITICAL_SECONDS = 60


@dataclass
class QuizSession:
    """Estado de uma tentativa de quiz.

    Fluxo: loading -> active -> submitting -> submitted.
    Falha ao carregar perguntas leva a ``error``; falha na submissao
    volta para ``active`` (o usuario pode tentar de novo).

    Attributes:
        email: Email informado na tela inicial
        duration: Duracao total do cronometro em segundos
        questions: Perguntas carregadas do banco de questoes
        status: Estado atual
        current_index: Pergunta exibida
        answers: Mapa indice -> alternativa escolhida
        visited: Indices ja exibidos (so cresce)
        time_left: Segundos restantes no cronometro
        started_at: Timestamp de entrada em ``active``
        error: Ultima mensagem de erro (carga ou submissao)
    """

    email: str
    duration: int = 30 * 60
    questions: list[TriviaQuestion] = field(default_factory=list)
    status: SessionStatus = SessionStatus.LOADING
    current_index: int = 0
    answers: dict[int, str] = field(default_factory=dict)
    visited: set[int] = field(default_factory=set)
    time_left: int = 0
    started_at: float | None = None
    error: str | None = None

    # -------------------------------------------------------------------------
    # Transicoes
    # -------------------------------------------------------------------------

    def start(self, questions: list[TriviaQuestion], now: float | None = None) -> None:
        """Entra em ``active`` com as perguntas carregadas."""
        self._require(SessionStatus.LOADING)
        if not questions:
            raise QuizSessionError("Quiz precisa de pelo menos uma pergunta")

        self.questions = list(questions)
        self.current_index = 0
        self.visited = {0}
        self.answers = {}
        self.time_left = self.duration
        self.started_at = time.time() if now is None else now
        self.error = None
        self.status = SessionStatus.ACTIVE

    def fail_load(self, message: str) -> None:
        self._require(SessionStatus.LOADING)
        self.error = message
        self.status = SessionStatus.ERROR

    def select_answer(self, choice: str) -> None:
        """Registra a alternativa da pergunta atual (substitui a anterior)."""
        self._require(SessionStatus.ACTIVE)
        if choice not in self.current_question.choices:
            raise QuizSessionError(
                f"Alternativa invalida para a pergunta {self.current_index + 1}",
                details={"choice": choice},
            )
        self.answers[self.current_index] = choice

    def navigate(self, index: int) -> None:
        self._require(SessionStatus.ACTIVE)
        if not 0 <= index < self.total_questions:
            raise QuizSessionError(
                f"Indice deve ser entre 0 e {self.total_questions - 1}",
                details={"index": index},
            )
        self.current_index = index
        self.visited.add(index)

    def next(self) -> None:
        if self.current_index < self.total_questions - 1:
            self.navigate(self.current_index + 1)

    def previous(self) -> None:
        if self.current_index > 0:
            self.navigate(self.current_index - 1)

    def tick(self, seconds: int = 1) -> bool:
        """Avanca o cronometro. Retorna True quando o tempo acabou."""
        self._require(SessionStatus.ACTIVE)
        self.time_left = max(self.time_left - seconds, 0)
        return self.time_left == 0

    def begin_submit(self, now: float | None = None) -> int:
        """Entra em ``submitting`` e retorna o tempo gasto em segundos."""
        self._require(SessionStatus.ACTIVE)
        self.status = SessionStatus.SUBMITTING
        return self.elapsed_seconds(now)

    def mark_submitted(self) -> None:
        self._require(SessionStatus.SUBMITTING)
        self.error = None
        self.status = SessionStatus.SUBMITTED

    def fail_submit(self, message: str) -> None:
        """Falha na submissao: volta para ``active`` para nova tentativa."""
        self._require(SessionStatus.SUBMITTING)
        self.error = message
        self.status = SessionStatus.ACTIVE

    # -------------------------------------------------------------------------
    # Consultas
    # -------------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> TriviaQuestion:
        return self.questions[self.current_index]

    @property
    def attempted(self) -> set[int]:
        return set(self.answers)

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    @property
    def remaining_count(self) -> int:
        return self.total_questions - self.answered_count

    @property
    def is_warning(self) -> bool:
        return self.time_left <= WARNING_SECONDS

    @property
    def is_critical(self) -> bool:
        return self.time_left <= CRITICAL_SECONDS

    @property
    def time_left_percentage(self) -> float:
        if self.duration <= 0:
            return 0.0
        return self.time_left / self.duration * 100

    def question_status(self, index: int) -> QuestionStatus:
        if index in self.answers:
            return QuestionStatus.ATTEMPTED
        if index in self.visited:
            return QuestionStatus.VISITED
        return QuestionStatus.NOT_VISITED

    def elapsed_seconds(self, now: float | None = None) -> int:
        if self.started_at is None:
            return 0
        now = time.time() if now is None else now
        return max(math.floor(now - self.started_at), 0)

    def format_time_left(self) -> str:
        minutes, secs = divmod(self.time_left, 60)
        return f"{minutes:02d}:{secs:02d}"

    def confirmation_message(self) -> str:
        return (
            f"You have answered {self.answered_count} out of {self.total_questions} questions.\n\n"
            "Are you sure you want to submit?"
        )

    def _require(self, *allowed: SessionStatus) -> None:
        if self.status not in allowed:
            expected = ", ".join(s.value for s in allowed)
            raise InvalidTransitionError(
                f"Operacao invalida no estado '{self.status.value}' (esperado: {expected})"
            )
