"""Quiz Scoring Engine - Correcao das respostas e metricas do relatorio."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..models.schemas import QuestionResult, QuizReport, SubmitQuizRequest, TriviaQuestion


@dataclass(frozen=True)
class GradedQuiz:
    """Resultado da correcao: lista por pergunta e pontuacao agregada."""

    results: list[QuestionResult]
    score: int

    @property
    def total_questions(self) -> int:
        return len(self.results)


class QuizScoringEngine:
    """Motor de pontuacao do quiz.

    Cada acerto vale 1 ponto. Sem credito parcial e sem penalidade.
    A comparacao e exata (case-sensitive, sem trim) contra ``correct_answer``.

    Example:
        >>> engine = QuizScoringEngine()
        >>> graded = engine.grade(questions, {0: "Paris", 2: "Euro"})
        >>> graded.score
        2
    """

    # Percentual minimo para mensagem de aprovacao no relatorio
    PASS_PERCENTAGE = 70.0

    def grade(
        self, questions: Sequence[TriviaQuestion], answers: Mapping[int, str]
    ) -> GradedQuiz:
        """Corrige as respostas.

        Args:
            questions: Perguntas na ordem exibida
            answers: Mapa indice -> alternativa escolhida (ausente = nao respondida)

        Returns:
            GradedQuiz com um QuestionResult por pergunta
        """
        results = []
        for index, question in enumerate(questions):
            answered = index in answers
            user_answer = answers[index] if answered else ""
            results.append(
                QuestionResult(
                    question=question.question,
                    user_answer=user_answer,
                    correct_answer=question.correct_answer,
                    is_correct=answered and user_answer == question.correct_answer,
                    all_choices=list(question.choices),
                )
            )

        score = sum(1 for r in results if r.is_correct)
        return GradedQuiz(results=results, score=score)

    def build_payload(
        self,
        email: str,
        questions: Sequence[TriviaQuestion],
        answers: Mapping[int, str],
        time_taken: int,
    ) -> SubmitQuizRequest:
        """Monta o payload de POST /submit-quiz a partir da sessao."""
        graded = self.grade(questions, answers)
        return SubmitQuizRequest(
            email=email,
            questions=graded.results,
            score=graded.score,
            total_questions=graded.total_questions,
            time_taken=time_taken,
        )

    def calculate_percentage(self, score: int, total: int) -> float:
        """Percentual de acerto com 2 casas (0.0 quando nao ha perguntas)."""
        if total <= 0:
            return 0.0
        return round(score / total * 100, 2)

    def is_passing(self, percentage: float) -> bool:
        return percentage >= self.PASS_PERCENTAGE

    @staticmethod
    def format_duration(seconds: int) -> str:
        """Formata segundos como ``"{m}m {s}s"``."""
        minutes, secs = divmod(max(int(seconds), 0), 60)
        return f"{minutes}m {secs}s"

    def build_report(self, payload: SubmitQuizRequest) -> QuizReport:
        """Gera os dados do relatorio a partir do payload submetido.

        ``total_questions`` ausente cai para o tamanho da lista de perguntas.
        """
        total = payload.total_questions or len(payload.questions)
        percentage = self.calculate_percentage(payload.score, total)

        return QuizReport(
            email=payload.email,
            score=payload.score,
            total_questions=total,
            percentage=percentage,
            passed=self.is_passing(percentage),
            time_taken=payload.time_taken,
            time_label=self.format_duration(payload.time_taken),
            questions=payload.questions,
        )
