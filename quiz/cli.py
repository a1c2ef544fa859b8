#!/usr/bin/env python3
"""
Wizard de terminal do quiz: email -> quiz -> relatorio.

Uso:
    python -m quiz.cli                       # usa API_URL do ambiente
    python -m quiz.cli --api-url http://localhost:5000/api --duration 600
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading
from typing import Callable

from pydantic import ValidationError

from config import load_settings

from .client import QuizApiClient
from .engine.scoring_engine import QuizScoringEngine
from .engine.session_controller import MissingEmailError, QuizSessionController
from .exceptions import QuizApiError, QuizSessionError
from .models.enums import QuestionStatus, SessionStatus
from .models.schemas import SubmitQuizRequest, is_valid_email
from .models.state import QuizSession
from .sources.question_bank import OpenTriviaClient
from .storage.session_storage import QUIZ_RESULTS_KEY, USER_EMAIL_KEY, SessionStorage

logger = logging.getLogger(__name__)

LETTERS = "ABCD"

STATUS_MARKS = {
    QuestionStatus.ATTEMPTED: "*",
    QuestionStatus.VISITED: ".",
    QuestionStatus.NOT_VISITED: " ",
}

HELP_TEXT = "Comandos: A-D ou 1-4 responde | n proxima | p anterior | g N vai para N | s submete"


class StdinReader:
    """Le linhas do stdin em thread daemon e entrega via asyncio.Queue.

    Permite que o cronometro dispare enquanto o usuario ainda nao digitou nada.
    """

    def __init__(self):
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._thread = threading.Thread(target=self._pump, daemon=True)
        self._thread.start()

    def _pump(self) -> None:
        for line in sys.stdin:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, line.rstrip("\n"))
        self._loop.call_soon_threadsafe(self._queue.put_nowait, None)

    async def readline(self, prompt: str = "") -> str:
        if prompt:
            print(prompt, end="", flush=True)
        line = await self._queue.get()
        if line is None:
            raise EOFError
        return line


class QuizWizard:
    """Tres telas sobre o mesmo SessionStorage."""

    def __init__(
        self,
        api: QuizApiClient,
        source: OpenTriviaClient,
        reader: StdinReader,
        storage: SessionStorage | None = None,
        question_count: int = 15,
        duration: int = 30 * 60,
        out: Callable[[str], None] = print,
    ):
        self.api = api
        self.source = source
        self.reader = reader
        self.storage = storage or SessionStorage()
        self.question_count = question_count
        self.duration = duration
        self.out = out
        self.scoring = QuizScoringEngine()

    async def run(self) -> None:
        screens = {
            "email": self.email_screen,
            "quiz": self.quiz_screen,
            "report": self.report_screen,
        }
        screen = "email"
        try:
            while screen:
                screen = await screens[screen]()
        except (EOFError, KeyboardInterrupt):
            self.out("\nAte logo!")

    # -------------------------------------------------------------------------
    # Tela 1: email
    # -------------------------------------------------------------------------

    async def email_screen(self) -> str:
        self.out("\n=== Quiz Application ===")
        self.out(f"{self.question_count} perguntas | {self.duration // 60} minutos")

        while True:
            email = (await self.reader.readline("Email Address: ")).strip()
            if not email:
                self.out("Please enter your email address")
                continue
            if not is_valid_email(email):
                self.out("Please enter a valid email address")
                continue

            try:
                await self.api.submit_email(email)
            except QuizApiError:
                self.out("Failed to submit email. Please try again.")
                continue

            self.storage.set_item(USER_EMAIL_KEY, email)
            return "quiz"

    # -------------------------------------------------------------------------
    # Tela 2: quiz
    # -------------------------------------------------------------------------

    async def quiz_screen(self) -> str:
        controller = QuizSessionController(
            question_source=self.source,
            api_client=self.api,
            storage=self.storage,
            scoring=self.scoring,
            question_count=self.question_count,
            duration=self.duration,
        )

        self.out("Loading quiz questions...")
        try:
            session = await controller.load()
        except MissingEmailError:
            return "email"

        if session.status is SessionStatus.ERROR:
            self.out(f"Error: {session.error}")
            await self.reader.readline("Pressione Enter para voltar...")
            return "email"

        timer = asyncio.create_task(controller.run_timer())
        try:
            while session.status is SessionStatus.ACTIVE:
                self.render_question(session)
                command = asyncio.create_task(self.reader.readline("> "))
                waiters = {command} if timer.done() else {command, timer}
                done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
                if command not in done:
                    command.cancel()
                    if session.error and session.status is SessionStatus.ACTIVE:
                        self.out(session.error)
                    continue
                await self.handle_command(controller, session, command.result().strip())
        finally:
            timer.cancel()

        if session.status is SessionStatus.SUBMITTED:
            if controller.last_payload and session.time_left == 0:
                self.out("\nTime is up! Seu quiz foi submetido automaticamente.")
            return "report"

        return "email"

    async def handle_command(
        self, controller: QuizSessionController, session: QuizSession, command: str
    ) -> None:
        cmd = command.lower()
        try:
            if cmd == "n":
                session.next()
            elif cmd == "p":
                session.previous()
            elif cmd.startswith("g "):
                session.navigate(int(cmd[2:].strip()) - 1)
            elif cmd == "s":
                await controller.submit(confirm=self.confirm)
                if session.error and session.status is SessionStatus.ACTIVE:
                    self.out(session.error)
            elif cmd and self._choice_index(cmd) is not None:
                index = self._choice_index(cmd)
                choices = session.current_question.choices
                if index >= len(choices):
                    self.out("Alternativa inexistente")
                    return
                session.select_answer(choices[index])
            else:
                self.out(HELP_TEXT)
        except ValueError:
            self.out(HELP_TEXT)
        except QuizSessionError as e:
            self.out(e.message)

    @staticmethod
    def _choice_index(cmd: str) -> int | None:
        if len(cmd) == 1 and cmd.upper() in LETTERS:
            return LETTERS.index(cmd.upper())
        if cmd.isdigit() and int(cmd) >= 1:
            return int(cmd) - 1
        return None

    async def confirm(self, message: str) -> bool:
        self.out(message)
        answer = await self.reader.readline("[y/N]: ")
        return answer.strip().lower() in ("y", "yes", "s", "sim")

    def render_question(self, session: QuizSession) -> None:
        q = session.current_question
        selected = session.answers.get(session.current_index)

        timer = session.format_time_left()
        if session.is_critical:
            timer += " !!"
        elif session.is_warning:
            timer += " !"

        self.out("")
        self.out(f"Quiz Application | {session.email} | {timer}")
        self.out(
            f"Question {session.current_index + 1} of {session.total_questions}"
            f" | {q.category} | {q.difficulty.value}"
        )
        self.out(q.question)
        for i, choice in enumerate(q.choices):
            mark = "  <" if choice == selected else ""
            self.out(f"  {LETTERS[i]}) {choice}{mark}")

        grid = []
        for i in range(session.total_questions):
            label = f"{i + 1}{STATUS_MARKS[session.question_status(i)]}"
            grid.append(f"[{label}]" if i == session.current_index else f" {label} ")
        self.out("".join(grid))
        self.out(f"Answered: {session.answered_count} | Remaining: {session.remaining_count}")

    # -------------------------------------------------------------------------
    # Tela 3: relatorio
    # -------------------------------------------------------------------------

    async def report_screen(self) -> str:
        data = self.storage.get_json(QUIZ_RESULTS_KEY)
        if data is None:
            return "email"
        try:
            payload = SubmitQuizRequest.model_validate(data)
        except ValidationError:
            logger.error("Resultado do quiz invalido no session storage")
            return "email"

        report = self.scoring.build_report(payload)

        self.out("\n=== Quiz Report ===")
        self.out(report.email)
        self.out(f"Score: {report.score}/{report.total_questions} ({report.percentage:.2f}%)")
        self.out("Great job!" if report.passed else "Keep practicing!")
        self.out(f"Time taken: {report.time_label}")

        for i, q in enumerate(report.questions, start=1):
            self.out(f"\n{i}. {q.question} [{'Correct' if q.is_correct else 'Incorrect'}]")
            if q.user_answer:
                self.out(f"   Your answer: {q.user_answer}")
            else:
                self.out("   Not answered")
            if not q.is_correct:
                self.out(f"   Correct answer: {q.correct_answer}")

        answer = await self.reader.readline("\nRetake Quiz? [y/N]: ")
        if answer.strip().lower() in ("y", "yes", "s", "sim"):
            self.storage.remove_item(QUIZ_RESULTS_KEY)
            return "email"
        return ""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Quiz de trivia no terminal")
    parser.add_argument("--api-url", default=settings.api_url, help="URL base da API do quiz")
    parser.add_argument(
        "--questions", type=int, default=settings.question_count, help="Numero de perguntas"
    )
    parser.add_argument(
        "--duration", type=int, default=settings.quiz_duration, help="Duracao em segundos"
    )
    parser.add_argument("--opentdb-url", default=settings.opentdb_url, help="Endpoint do banco de questoes")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> None:
    reader = StdinReader()
    reader.start()

    async with QuizApiClient(args.api_url) as api:
        wizard = QuizWizard(
            api=api,
            source=OpenTriviaClient(base_url=args.opentdb_url),
            reader=reader,
            question_count=args.questions,
            duration=args.duration,
        )
        await wizard.run()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
