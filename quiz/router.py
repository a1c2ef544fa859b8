"""Quiz Router - Endpoints FastAPI de email, submissao e consulta de resultados."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import app_state

from .exceptions import QuizNotFoundError, StorageError
from .models.schemas import (
    ErrorResponse,
    LatestQuizEnvelope,
    QuizResponsesEnvelope,
    SubmitEmailRequest,
    SubmitEmailResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
)
from .storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Quiz"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)

NOT_FOUND_MESSAGE = "No quiz results found for this email"

# Mensagem de erro 400 por rota (usada pelo handler de validacao do server)
VALIDATION_MESSAGES = {
    "/api/submit-email": "Email is required",
    "/api/submit-quiz": "Missing required fields",
}


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


async def get_quiz_store() -> QuizStore:
    """Dependency para obter o QuizStore da aplicacao (com indices garantidos)."""
    store = app_state.get_store()
    await app_state.ensure_indexes()
    return store


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/submit-email", response_model=SubmitEmailResponse)
async def submit_email(
    request: SubmitEmailRequest,
    store: QuizStore = Depends(get_quiz_store),
):
    """Registra o email (cria o usuario apenas se ainda nao existir)."""
    try:
        user = await store.upsert_user(request.email)
    except PyMongoError as e:
        logger.error(f"Erro ao registrar email: {e}", exc_info=True)
        raise StorageError("Failed to submit email") from e

    return SubmitEmailResponse(email=user.email)


@router.post("/submit-quiz", response_model=SubmitQuizResponse, status_code=201)
async def submit_quiz(
    request: SubmitQuizRequest,
    store: QuizStore = Depends(get_quiz_store),
):
    """Salva uma tentativa de quiz ja corrigida pelo cliente.

    - ``totalQuestions`` vem sempre de ``len(questions)``
    - ``score`` e armazenado como recebido; divergencias so geram warning
    - Refazer o quiz sempre cria um novo registro
    """
    total = len(request.questions)
    flagged = sum(1 for q in request.questions if q.is_correct)
    if request.score > total or request.score != flagged:
        logger.warning(
            f"Payload inconsistente de {request.email}: score={request.score}, "
            f"isCorrect={flagged}, totalQuestions={total}"
        )

    try:
        record = await store.insert_quiz_response(
            email=request.email,
            questions=request.questions,
            score=request.score,
            time_taken=request.time_taken,
        )
    except PyMongoError as e:
        logger.error(f"Erro ao salvar quiz: {e}", exc_info=True)
        raise StorageError("Failed to submit quiz") from e

    return SubmitQuizResponse(
        quiz_id=record.id,
        score=record.score,
        total_questions=record.total_questions,
    )


@router.get(
    "/quiz/{email}",
    response_model=QuizResponsesEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_quiz_results(
    email: str,
    store: QuizStore = Depends(get_quiz_store),
):
    """Lista todas as tentativas do email, mais recente primeiro."""
    try:
        responses = await store.find_responses_by_email(email)
    except PyMongoError as e:
        logger.error(f"Erro ao buscar resultados: {e}", exc_info=True)
        raise StorageError("Failed to fetch quiz results") from e

    if not responses:
        raise QuizNotFoundError(NOT_FOUND_MESSAGE)

    return QuizResponsesEnvelope(quiz_responses=responses)


@router.get(
    "/quiz/{email}/latest",
    response_model=LatestQuizEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_latest_quiz(
    email: str,
    store: QuizStore = Depends(get_quiz_store),
):
    """Retorna a tentativa mais recente do email."""
    try:
        latest = await store.find_latest_response_by_email(email)
    except PyMongoError as e:
        logger.error(f"Erro ao buscar ultimo quiz: {e}", exc_info=True)
        raise StorageError("Failed to fetch quiz result") from e

    if latest is None:
        raise QuizNotFoundError(NOT_FOUND_MESSAGE)

    return LatestQuizEnvelope(quiz=latest)
