"""Quiz Session Controller - Ciclo de vida da sessao no cliente."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..exceptions import QuestionSourceError, QuizApiError, QuizSessionError
from ..models.enums import SessionStatus
from ..models.schemas import SubmitQuizRequest
from ..models.state import QuizSession
from ..storage.session_storage import QUIZ_RESULTS_KEY, USER_EMAIL_KEY, SessionStorage
from .scoring_engine import QuizScoringEngine

if TYPE_CHECKING:
    from ..client import QuizApiClient
    from ..sources.question_bank import OpenTriviaClient

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load quiz questions. Please try again."
SUBMIT_ERROR_MESSAGE = "Failed to submit quiz. Please try again."

# Recebe a mensagem de confirmacao e responde sim/nao (sync ou async)
ConfirmCallback = Callable[[str], bool | Awaitable[bool]]


class MissingEmailError(QuizSessionError):
    """Nao ha email no session storage; o cliente deve voltar a tela inicial."""


class QuizSessionController:
    """Dono unico da QuizSession: carga, cronometro e submissao.

    - ``load()`` busca as perguntas uma unica vez (latch one-shot), mesmo que
      seja chamado de novo pela camada de apresentacao
    - ``tick()`` avanca o cronometro; no zero submete sem confirmacao
    - ``submit()`` pede confirmacao, corrige, envia e guarda o payload no
      session storage para o relatorio

    Example:
        >>> controller = QuizSessionController(source, api, storage)
        >>> session = await controller.load()
        >>> session.select_answer(session.current_question.choices[0])
        >>> await controller.submit(confirm=lambda msg: True)
    """

    def __init__(
        self,
        question_source: OpenTriviaClient,
        api_client: QuizApiClient,
        storage: SessionStorage,
        scoring: QuizScoringEngine | None = None,
        question_count: int = 15,
        duration: int = 30 * 60,
        clock: Callable[[], float] | None = None,
    ):
        self.question_source = question_source
        self.api_client = api_client
        self.storage = storage
        self.scoring = scoring or QuizScoringEngine()
        self.question_count = question_count
        self.duration = duration
        self._clock = clock
        self._fetch_started = False
        self.session: QuizSession | None = None
        self.last_payload: SubmitQuizRequest | None = None

    def _now(self) -> float | None:
        return self._clock() if self._clock else None

    # -------------------------------------------------------------------------
    # Carga
    # -------------------------------------------------------------------------

    async def load(self) -> QuizSession:
        """Cria a sessao e carrega as perguntas (apenas na primeira chamada).

        Raises:
            MissingEmailError: Se nao ha ``userEmail`` no session storage
        """
        if self._fetch_started:
            return self.session

        email = self.storage.get_item(USER_EMAIL_KEY)
        if not email:
            raise MissingEmailError("No email in session storage")

        self._fetch_started = True
        self.session = QuizSession(email=email, duration=self.duration)

        try:
            questions = await self.question_source.fetch_questions(self.question_count)
        except QuestionSourceError as e:
            logger.error(f"Erro ao carregar perguntas: {e.message}")
            self.session.fail_load(LOAD_ERROR_MESSAGE)
            return self.session

        self.session.start(questions, now=self._now())
        logger.info(f"Quiz iniciado para {email} com {len(questions)} perguntas")
        return self.session

    # -------------------------------------------------------------------------
    # Submissao
    # -------------------------------------------------------------------------

    async def submit(
        self, confirm: ConfirmCallback | None = None, auto: bool = False
    ) -> SubmitQuizRequest | None:
        """Submete o quiz.

        Args:
            confirm: Pergunta sim/nao exibida ao usuario (ignorada se ``auto``)
            auto: Submissao automatica por fim do tempo, sem confirmacao

        Returns:
            Payload enviado, ou None se cancelado, ja em andamento ou com falha
        """
        session = self._require_session()

        if session.status is not SessionStatus.ACTIVE:
            logger.debug(f"Submit ignorado no estado {session.status.value}")
            return None

        if not auto:
            if confirm is None:
                raise QuizSessionError("Submissao manual exige confirmacao")
            answer = confirm(session.confirmation_message())
            if inspect.isawaitable(answer):
                answer = await answer
            if not answer:
                return None
            # o cronometro pode ter submetido enquanto aguardava a confirmacao
            if session.status is not SessionStatus.ACTIVE:
                return None

        time_taken = session.begin_submit(now=self._now())

        # qualquer falha daqui em diante devolve a sessao para active
        try:
            payload = self.scoring.build_payload(
                email=session.email,
                questions=session.questions,
                answers=session.answers,
                time_taken=time_taken,
            )
            await self.api_client.submit_quiz(payload)
        except QuizApiError as e:
            logger.error(f"Erro ao submeter quiz: {e.message}")
            session.fail_submit(SUBMIT_ERROR_MESSAGE)
            return None
        except Exception as e:
            logger.error(f"Erro inesperado ao submeter quiz: {e}", exc_info=True)
            session.fail_submit(SUBMIT_ERROR_MESSAGE)
            return None

        self.storage.set_json(QUIZ_RESULTS_KEY, payload.model_dump(mode="json", by_alias=True))
        session.mark_submitted()
        self.last_payload = payload
        logger.info(f"Quiz submetido: {payload.score}/{payload.total_questions}")
        return payload

    # -------------------------------------------------------------------------
    # Cronometro
    # -------------------------------------------------------------------------

    async def tick(self, seconds: int = 1) -> bool:
        """Avanca o cronometro; no zero dispara submissao automatica.

        Returns:
            True se o tempo acabou neste tick
        """
        session = self._require_session()
        if session.status is not SessionStatus.ACTIVE:
            return False

        expired = session.tick(seconds)
        if expired:
            logger.info("Tempo esgotado, submetendo automaticamente")
            await self.submit(auto=True)
        return expired

    async def run_timer(self, interval: float = 1.0) -> None:
        """Loop do cronometro: um tick por ``interval`` enquanto ativo."""
        session = self._require_session()
        while session.status in (SessionStatus.ACTIVE, SessionStatus.SUBMITTING):
            await asyncio.sleep(interval)
            if await self.tick():
                return

    def _require_session(self) -> QuizSession:
        if self.session is None:
            raise QuizSessionError("Sessao ainda nao carregada; chame load() primeiro")
        return self.session
