"""Quiz Schemas - Modelos Pydantic para request/response e documentos."""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import QuestionType, QuizDifficulty

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    """Chave canonica do usuario: sem espacos nas pontas e minuscula."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Validacao leve de formato usada na tela de email."""
    return bool(EMAIL_PATTERN.match(email))


class CamelModel(BaseModel):
    """Base com aliases camelCase no JSON (nomes snake_case no Python)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# BANCO DE QUESTOES
# =============================================================================


class TriviaQuestion(CamelModel):
    """Pergunta ja decodificada e com alternativas embaralhadas."""

    question: str = Field(..., description="Enunciado decodificado")
    correct_answer: str = Field(..., description="Resposta correta decodificada")
    choices: list[str] = Field(..., min_length=1, description="Alternativas embaralhadas")
    type: QuestionType = Field(default=QuestionType.MULTIPLE)
    difficulty: QuizDifficulty = Field(default=QuizDifficulty.MEDIUM)
    category: str = Field(default="")


# =============================================================================
# DOCUMENTOS PERSISTIDOS
# =============================================================================


class QuestionResult(CamelModel):
    """Resultado de uma pergunta, embutido no QuizResponse.

    ``is_correct`` e calculado uma unica vez na submissao e nunca recalculado.
    """

    question: str
    user_answer: str = Field(default="", description="Vazio quando nao respondida")
    correct_answer: str
    is_correct: bool = False
    all_choices: list[str] = Field(default_factory=list)


class UserRecord(CamelModel):
    """Documento da colecao ``users``."""

    id: str = Field(..., alias="_id")
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str:
        return str(v)


class QuizResponseRecord(CamelModel):
    """Documento da colecao ``quiz_responses`` (imutavel apos criado)."""

    id: str = Field(..., alias="_id")
    email: str
    questions: list[QuestionResult] = Field(default_factory=list)
    score: int
    total_questions: int = 15
    time_taken: int = Field(..., description="Tempo gasto em segundos")
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str:
        return str(v)


# =============================================================================
# REQUESTS / RESPONSES
# =============================================================================


class SubmitEmailRequest(BaseModel):
    """Request de POST /api/submit-email."""

    email: str

    @field_validator("email")
    @classmethod
    def _email_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Email is required")
        return v


class SubmitEmailResponse(BaseModel):
    message: str = "Email submitted successfully"
    email: str


class SubmitQuizRequest(CamelModel):
    """Request de POST /api/submit-quiz.

    ``total_questions`` enviado pelo cliente e ignorado pelo servidor,
    que sempre usa ``len(questions)``.
    """

    email: str
    questions: list[QuestionResult]
    score: int = Field(..., ge=0)
    time_taken: int = Field(..., ge=0, description="Segundos desde o inicio")
    total_questions: int | None = None

    @field_validator("email")
    @classmethod
    def _email_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Email is required")
        return v


class SubmitQuizResponse(CamelModel):
    message: str = "Quiz submitted successfully"
    quiz_id: str
    score: int
    total_questions: int


class QuizResponsesEnvelope(CamelModel):
    """Response de GET /api/quiz/{email}."""

    quiz_responses: list[QuizResponseRecord]


class LatestQuizEnvelope(CamelModel):
    """Response de GET /api/quiz/{email}/latest."""

    quiz: QuizResponseRecord


class HealthResponse(BaseModel):
    message: str = "Quiz Application API is running!"


class ErrorResponse(BaseModel):
    error: str
    details: Any | None = None


# =============================================================================
# RELATORIO (CLIENTE)
# =============================================================================


class QuizReport(CamelModel):
    """Dados da tela de relatorio, derivados do payload submetido."""

    email: str
    score: int
    total_questions: int
    percentage: float
    passed: bool
    time_taken: int
    time_label: str
    questions: list[QuestionResult]
