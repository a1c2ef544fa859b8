"""Quiz Store - Persistencia de usuarios e respostas no MongoDB."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from ..models.schemas import (
    QuestionResult,
    QuizResponseRecord,
    UserRecord,
    normalize_email,
)

if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizStore:
    """Abstracao sobre o banco de documentos do quiz.

    Duas colecoes, sem relacao forcada entre elas alem do email:
        - users -> {email, createdAt, updatedAt} (email unico)
        - quiz_responses -> QuizResponse imutavel, varias por email

    Todas as escritas atingem um unico documento, entao nao ha transacoes.
    Erros do driver (PyMongoError) sobem para o chamador.

    Example:
        >>> store = QuizStore(client["quiz_app"])
        >>> await store.upsert_user(" A@B.com ")
        >>> await store.find_latest_response_by_email("a@b.com")
    """

    USERS = "users"
    QUIZ_RESPONSES = "quiz_responses"

    # Ordem "mais recente primeiro"; _id desempata documentos no mesmo instante
    NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]

    def __init__(self, database: AsyncDatabase):
        """Inicializa store com o database do MongoDB.

        Args:
            database: Database async do pymongo (ou fake com a mesma interface)
        """
        self.database = database

    @property
    def users(self):
        return self.database[self.USERS]

    @property
    def quiz_responses(self):
        return self.database[self.QUIZ_RESPONSES]

    async def ensure_indexes(self) -> None:
        """Cria indices usados pelas consultas (idempotente)."""
        await self.users.create_index([("email", ASCENDING)], unique=True)
        await self.quiz_responses.create_index(
            [("email", ASCENDING), ("createdAt", DESCENDING)]
        )
        logger.debug("Indices do quiz garantidos")

    async def upsert_user(self, email: str) -> UserRecord:
        """Retorna o usuario existente ou cria um novo.

        Idempotente: chamar duas vezes com o mesmo email (em qualquer caixa,
        com ou sem espacos) resulta em um unico documento.

        Args:
            email: Email como digitado pelo usuario

        Returns:
            UserRecord persistido
        """
        key = normalize_email(email)
        now = _utcnow()

        doc = await self.users.find_one_and_update(
            {"email": key},
            {"$setOnInsert": {"email": key, "createdAt": now, "updatedAt": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.debug(f"Usuario garantido: {key}")
        return UserRecord.model_validate(doc)

    async def insert_quiz_response(
        self,
        email: str,
        questions: list[QuestionResult],
        score: int,
        time_taken: int,
    ) -> QuizResponseRecord:
        """Insere uma nova resposta de quiz (nunca faz merge).

        ``totalQuestions`` e derivado de ``len(questions)``.

        Returns:
            QuizResponseRecord com ``id`` e timestamps preenchidos
        """
        now = _utcnow()
        document: dict[str, Any] = {
            "email": normalize_email(email),
            "questions": [q.model_dump(by_alias=True) for q in questions],
            "score": score,
            "totalQuestions": len(questions),
            "timeTaken": time_taken,
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self.quiz_responses.insert_one(document)
        document["_id"] = result.inserted_id

        logger.info(f"Quiz salvo: {result.inserted_id} ({document['email']})")
        return QuizResponseRecord.model_validate(document)

    async def find_responses_by_email(self, email: str) -> list[QuizResponseRecord]:
        """Lista respostas do email, mais recente primeiro.

        Lista vazia significa "nao encontrado" para o chamador.
        """
        cursor = self.quiz_responses.find({"email": normalize_email(email)}).sort(
            self.NEWEST_FIRST
        )
        docs = await cursor.to_list(length=None)
        return [QuizResponseRecord.model_validate(d) for d in docs]

    async def find_latest_response_by_email(self, email: str) -> QuizResponseRecord | None:
        """Retorna a resposta mais recente do email ou None."""
        doc = await self.quiz_responses.find_one(
            {"email": normalize_email(email)}, sort=self.NEWEST_FIRST
        )
        if doc is None:
            logger.debug(f"Nenhum quiz para: {email}")
            return None
        return QuizResponseRecord.model_validate(doc)
