"""Core module - shared state for the API process (MongoDB client and store)."""

from __future__ import annotations

import logging
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from config import Settings, load_settings
from quiz.storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)

# Instancias globais, criadas no startup e liberadas no shutdown
mongo_client: Optional[AsyncMongoClient] = None
store: Optional[QuizStore] = None
indexes_ready: bool = False


async def connect(settings: Optional[Settings] = None) -> QuizStore:
    """Abre o cliente MongoDB e prepara o QuizStore.

    Uma falha de conexao e apenas logada: o servidor continua no ar e as
    requisicoes passam a falhar com 500 ate o banco voltar. Os indices
    ficam pendentes e sao criados por ensure_indexes() na proxima requisicao.
    """
    global mongo_client, store

    settings = settings or load_settings()

    if store is not None:
        return store

    mongo_client = AsyncMongoClient(settings.mongodb_uri)
    store = QuizStore(mongo_client[settings.mongodb_db])

    try:
        await mongo_client.admin.command("ping")
        logger.info(f"Conectado ao MongoDB (db={settings.mongodb_db})")
    except PyMongoError as e:
        logger.error(f"Erro de conexao com MongoDB: {e}")
        return store

    await ensure_indexes()
    return store


async def ensure_indexes() -> bool:
    """Cria os indices uma unica vez; falhas ficam para a proxima chamada."""
    global indexes_ready

    if indexes_ready:
        return True

    try:
        await get_store().ensure_indexes()
    except PyMongoError as e:
        logger.warning(f"Indices do MongoDB pendentes: {e}")
        return False

    indexes_ready = True
    return True


def get_store() -> QuizStore:
    """Retorna o QuizStore ativo."""
    if store is None:
        raise RuntimeError("QuizStore nao inicializado; chame app_state.connect() no startup")
    return store


async def cleanup() -> None:
    """Fecha o cliente MongoDB no shutdown."""
    global mongo_client, store, indexes_ready

    if mongo_client is not None:
        await mongo_client.close()
        logger.info("Conexao com MongoDB fechada")

    mongo_client = None
    store = None
    indexes_ready = False
