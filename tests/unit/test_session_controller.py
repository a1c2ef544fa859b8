# =============================================================================
# TESTES - Quiz Session Controller
# =============================================================================
# Testes unitarios para carga, cronometro e submissao da sessao
# =============================================================================

from unittest.mock import AsyncMock

import pytest


class FakeClock:
    """Relogio controlavel para calcular timeTaken."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def source(sample_trivia_questions):
    mock = AsyncMock()
    mock.fetch_questions.return_value = sample_trivia_questions
    return mock


@pytest.fixture
def api():
    return AsyncMock()


@pytest.fixture
def storage():
    from quiz.storage.session_storage import USER_EMAIL_KEY, SessionStorage

    s = SessionStorage()
    s.set_item(USER_EMAIL_KEY, "user@example.com")
    return s


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(source, api, storage, clock):
    from quiz.engine.session_controller import QuizSessionController

    return QuizSessionController(source, api, storage, clock=clock)


class TestControllerLoad:
    """Testes para carga das perguntas."""

    @pytest.mark.asyncio
    async def test_load_starts_session(self, controller, source):
        """Verifica sessao ativa com 15 perguntas."""
        from quiz.models.enums import SessionStatus

        session = await controller.load()

        assert session.status == SessionStatus.ACTIVE
        assert session.email == "user@example.com"
        assert session.total_questions == 15
        assert session.time_left == 1800
        source.fetch_questions.assert_awaited_once_with(15)

    @pytest.mark.asyncio
    async def test_load_fetches_once(self, controller, source):
        """Verifica que chamar load de novo nao refaz a busca."""
        first = await controller.load()
        second = await controller.load()

        assert first is second
        assert source.fetch_questions.await_count == 1

    @pytest.mark.asyncio
    async def test_load_without_email(self, source, api):
        """Verifica que sem email a sessao nao e criada."""
        from quiz.engine.session_controller import MissingEmailError, QuizSessionController
        from quiz.storage.session_storage import SessionStorage

        controller = QuizSessionController(source, api, SessionStorage())

        with pytest.raises(MissingEmailError):
            await controller.load()
        source.fetch_questions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_load_failure_sets_error(self, controller, source):
        """Verifica estado error com mensagem para o usuario."""
        from quiz.engine.session_controller import LOAD_ERROR_MESSAGE
        from quiz.exceptions import QuestionSourceError
        from quiz.models.enums import SessionStatus

        source.fetch_questions.side_effect = QuestionSourceError("Failed to load quiz questions")

        session = await controller.load()

        assert session.status == SessionStatus.ERROR
        assert session.error == LOAD_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_custom_question_count(self, source, api, storage):
        """Verifica quantidade configuravel de perguntas."""
        from quiz.engine.session_controller import QuizSessionController

        controller = QuizSessionController(source, api, storage, question_count=5)
        await controller.load()

        source.fetch_questions.assert_awaited_once_with(5)


class TestControllerSubmit:
    """Testes para submissao manual."""

    @pytest.mark.asyncio
    async def test_submit_requires_load(self, controller):
        """Verifica erro ao submeter sem sessao."""
        from quiz.exceptions import QuizSessionError

        with pytest.raises(QuizSessionError):
            await controller.submit(confirm=lambda msg: True)

    @pytest.mark.asyncio
    async def test_manual_submit_requires_confirm(self, controller):
        """Verifica que submissao manual exige callback de confirmacao."""
        from quiz.exceptions import QuizSessionError

        await controller.load()

        with pytest.raises(QuizSessionError):
            await controller.submit()

    @pytest.mark.asyncio
    async def test_cancelled_confirmation(self, controller, api):
        """Verifica que cancelar mantem a sessao ativa e nada e enviado."""
        from quiz.models.enums import SessionStatus

        session = await controller.load()
        messages = []

        def confirm(msg):
            messages.append(msg)
            return False

        result = await controller.submit(confirm=confirm)

        assert result is None
        assert session.status == SessionStatus.ACTIVE
        assert messages[0].startswith("You have answered 0 out of 15 questions.")
        api.submit_quiz.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_success(self, controller, api, storage, clock):
        """Verifica payload, estado submitted e resultado no storage."""
        from quiz.models.enums import SessionStatus
        from quiz.storage.session_storage import QUIZ_RESULTS_KEY

        session = await controller.load()
        for i in range(10):
            session.navigate(i)
            session.select_answer(f"Answer {i}")
        clock.now = 1321.7

        payload = await controller.submit(confirm=lambda msg: True)

        assert payload.score == 10
        assert payload.total_questions == 15
        assert payload.time_taken == 321
        assert session.status == SessionStatus.SUBMITTED
        api.submit_quiz.assert_awaited_once_with(payload)

        stored = storage.get_json(QUIZ_RESULTS_KEY)
        assert stored["score"] == 10
        assert stored["totalQuestions"] == 15
        assert stored["timeTaken"] == 321
        assert len(stored["questions"]) == 15

    @pytest.mark.asyncio
    async def test_async_confirm_callback(self, controller, api):
        """Verifica suporte a confirmacao async."""
        await controller.load()

        async def confirm(msg):
            return True

        payload = await controller.submit(confirm=confirm)

        assert payload is not None
        api.submit_quiz.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_submit_failure_returns_to_active(self, controller, api, storage):
        """Verifica que falha no backend permite nova tentativa."""
        from quiz.engine.session_controller import SUBMIT_ERROR_MESSAGE
        from quiz.exceptions import QuizApiError
        from quiz.models.enums import SessionStatus
        from quiz.storage.session_storage import QUIZ_RESULTS_KEY

        session = await controller.load()
        api.submit_quiz.side_effect = QuizApiError("Failed to submit quiz", status_code=500)

        result = await controller.submit(confirm=lambda msg: True)

        assert result is None
        assert session.status == SessionStatus.ACTIVE
        assert session.error == SUBMIT_ERROR_MESSAGE
        assert QUIZ_RESULTS_KEY not in storage

        api.submit_quiz.side_effect = None
        assert await controller.submit(confirm=lambda msg: True) is not None
        assert session.status == SessionStatus.SUBMITTED

    @pytest.mark.asyncio
    async def test_submit_after_submitted_ignored(self, controller, api):
        """Verifica que nao ha segunda submissao."""
        await controller.load()
        await controller.submit(confirm=lambda msg: True)

        assert await controller.submit(confirm=lambda msg: True) is None
        assert api.submit_quiz.await_count == 1


class TestControllerTimer:
    """Testes para cronometro e submissao automatica."""

    @pytest.mark.asyncio
    async def test_tick_decrements(self, controller):
        """Verifica decremento sem submissao."""
        session = await controller.load()

        expired = await controller.tick()

        assert expired is False
        assert session.time_left == 1799

    @pytest.mark.asyncio
    async def test_expiry_auto_submits_without_confirm(self, controller, api):
        """Verifica submissao automatica quando o tempo acaba."""
        from quiz.models.enums import SessionStatus

        session = await controller.load()
        session.select_answer("Answer 0")
        session.time_left = 1

        expired = await controller.tick()

        assert expired is True
        assert session.time_left == 0
        assert session.status == SessionStatus.SUBMITTED
        assert controller.last_payload.score == 1
        api.submit_quiz.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_tick_ignored_when_not_active(self, controller):
        """Verifica que o cronometro para apos a submissao."""
        session = await controller.load()
        await controller.submit(confirm=lambda msg: True)
        left = session.time_left

        assert await controller.tick() is False
        assert session.time_left == left

    @pytest.mark.asyncio
    async def test_timer_submit_during_confirmation(self, controller, api):
        """Verifica que confirmacao tardia nao gera segunda submissao."""
        session = await controller.load()
        session.time_left = 1

        async def confirm(msg):
            await controller.tick()
            return True

        result = await controller.submit(confirm=confirm)

        assert result is None
        assert api.submit_quiz.await_count == 1

    @pytest.mark.asyncio
    async def test_run_timer_until_expiry(self, controller, api):
        """Verifica loop do cronometro ate o tempo acabar."""
        from quiz.models.enums import SessionStatus

        session = await controller.load()
        session.time_left = 3

        await controller.run_timer(interval=0)

        assert session.time_left == 0
        assert session.status == SessionStatus.SUBMITTED
        api.submit_quiz.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_timer_stops_after_manual_submit(self, controller):
        """Verifica que o loop termina quando a sessao nao esta mais ativa."""
        await controller.load()
        await controller.submit(confirm=lambda msg: True)

        await controller.run_timer(interval=0)


class TestControllerSubmitFailures:
    """Testes para respostas invalidas do backend durante a submissao."""

    @pytest.mark.asyncio
    async def test_non_json_success_returns_to_active(self, source, storage):
        """Verifica 201 com HTML: sessao volta para active e permite reenviar."""
        import httpx

        from quiz.client import QuizApiClient
        from quiz.engine.session_controller import SUBMIT_ERROR_MESSAGE, QuizSessionController
        from quiz.models.enums import SessionStatus
        from quiz.storage.session_storage import QUIZ_RESULTS_KEY

        transport = httpx.MockTransport(lambda r: httpx.Response(201, text="<html>ok</html>"))
        async with QuizApiClient("http://backend.test/api", transport=transport) as api:
            controller = QuizSessionController(source, api, storage)
            session = await controller.load()

            result = await controller.submit(auto=True)

        assert result is None
        assert session.status == SessionStatus.ACTIVE
        assert session.error == SUBMIT_ERROR_MESSAGE
        assert QUIZ_RESULTS_KEY not in storage

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_to_active(self, controller, api, capture_logs):
        """Verifica que erro inesperado no envio nao deixa a sessao em submitting."""
        from quiz.models.enums import SessionStatus

        session = await controller.load()
        api.submit_quiz.side_effect = RuntimeError("boom")

        assert await controller.submit(confirm=lambda msg: True) is None
        assert session.status == SessionStatus.ACTIVE
        assert "Erro inesperado ao submeter quiz" in capture_logs.text

    @pytest.mark.asyncio
    async def test_timer_survives_failed_auto_submit(self, controller, api):
        """Verifica que o cronometro nao morre quando a submissao automatica falha."""
        from quiz.models.enums import SessionStatus

        session = await controller.load()
        session.time_left = 1
        api.submit_quiz.side_effect = RuntimeError("boom")

        assert await controller.tick() is True
        assert session.status == SessionStatus.ACTIVE
