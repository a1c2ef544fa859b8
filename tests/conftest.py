# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza fakes do MongoDB, dados de exemplo e clientes de teste
# =============================================================================

import copy
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId


# =============================================================================
# FAKE MONGODB (em memoria)
# =============================================================================


def _matches(doc: dict[str, Any], filter_: dict[str, Any]) -> bool:
    return all(doc.get(k) == v for k, v in filter_.items())


def _sort_docs(docs: list[dict], keys: list[tuple[str, int]]) -> list[dict]:
    result = list(docs)
    for field, direction in reversed(keys):
        result.sort(key=lambda d: d[field], reverse=direction < 0)
    return result


class FakeCursor:
    """Cursor com o subconjunto usado pelo QuizStore (sort + to_list)."""

    def __init__(self, docs: list[dict]):
        self._docs = docs

    def sort(self, keys: list[tuple[str, int]]):
        self._docs = _sort_docs(self._docs, keys)
        return self

    async def to_list(self, length: int | None = None) -> list[dict]:
        docs = [copy.deepcopy(d) for d in self._docs]
        return docs if length is None else docs[:length]


class FakeCollection:
    """Colecao em memoria com a interface async do pymongo usada no projeto."""

    def __init__(self, name: str):
        self.name = name
        self.docs: list[dict] = []
        self.indexes: list[dict] = []

    async def create_index(self, keys, unique: bool = False, **kwargs):
        self.indexes.append({"keys": keys, "unique": unique})
        return "_".join(f"{k}_{d}" for k, d in keys)

    async def insert_one(self, document: dict):
        doc = copy.deepcopy(document)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one_and_update(
        self, filter_, update, upsert=False, return_document=None, **kwargs
    ):
        for doc in self.docs:
            if _matches(doc, filter_):
                doc.update(update.get("$set", {}))
                return copy.deepcopy(doc)

        if not upsert:
            return None

        doc = dict(filter_)
        doc.update(update.get("$setOnInsert", {}))
        doc.update(update.get("$set", {}))
        doc["_id"] = ObjectId()
        self.docs.append(doc)
        return copy.deepcopy(doc)

    def find(self, filter_=None):
        filter_ = filter_ or {}
        return FakeCursor([d for d in self.docs if _matches(d, filter_)])

    async def find_one(self, filter_=None, sort=None):
        docs = [d for d in self.docs if _matches(d, filter_ or {})]
        if sort:
            docs = _sort_docs(docs, sort)
        return copy.deepcopy(docs[0]) if docs else None


class FakeDatabase:
    def __init__(self):
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


@pytest.fixture
def fake_db():
    """Database MongoDB fake (em memoria)."""
    return FakeDatabase()


@pytest.fixture
def quiz_store(fake_db):
    """QuizStore sobre o database fake."""
    from quiz.storage.quiz_store import QuizStore

    return QuizStore(fake_db)


# =============================================================================
# FIXTURES DO FASTAPI
# =============================================================================


@pytest.fixture
def client(quiz_store):
    """Cliente de teste FastAPI com o store fake injetado."""
    from fastapi.testclient import TestClient

    from quiz.router import get_quiz_store
    from server import app

    app.dependency_overrides[get_quiz_store] = lambda: quiz_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def asgi_transport(quiz_store):
    """Transport httpx que encaminha para a app (sem servidor rodando)."""
    from httpx import ASGITransport

    from quiz.router import get_quiz_store
    from server import app

    app.dependency_overrides[get_quiz_store] = lambda: quiz_store
    yield ASGITransport(app=app)
    app.dependency_overrides.clear()


# =============================================================================
# FIXTURES DO QUIZ
# =============================================================================


@pytest.fixture
def sample_trivia_questions():
    """15 perguntas decodificadas; a correta e sempre 'Answer {i}'."""
    from quiz.models.schemas import TriviaQuestion

    difficulties = ["easy", "medium", "hard"]
    return [
        TriviaQuestion(
            question=f"Question {i}?",
            correct_answer=f"Answer {i}",
            choices=[f"Wrong {i}a", f"Answer {i}", f"Wrong {i}b", f"Wrong {i}c"],
            type="multiple",
            difficulty=difficulties[i % 3],
            category="General Knowledge",
        )
        for i in range(15)
    ]


@pytest.fixture
def make_quiz_payload():
    """Factory de payloads JSON (camelCase) para POST /api/submit-quiz."""

    def _make(email: str = "user@example.com", total: int = 15, correct: int = 10, **extra):
        questions = []
        for i in range(total):
            is_correct = i < correct
            questions.append(
                {
                    "question": f"Question {i}?",
                    "userAnswer": f"Answer {i}" if is_correct else f"Wrong {i}a",
                    "correctAnswer": f"Answer {i}",
                    "isCorrect": is_correct,
                    "allChoices": [f"Wrong {i}a", f"Answer {i}", f"Wrong {i}b", f"Wrong {i}c"],
                }
            )
        payload = {
            "email": email,
            "questions": questions,
            "score": correct,
            "totalQuestions": total,
            "timeTaken": 321,
        }
        payload.update(extra)
        return payload

    return _make


@pytest.fixture
def opentdb_response():
    """Resposta bruta do Open Trivia DB com entidades HTML."""
    return {
        "response_code": 0,
        "results": [
            {
                "type": "multiple",
                "difficulty": "easy",
                "category": "Entertainment: Music &amp; Film",
                "question": "Who wrote &quot;Hamlet&quot;?",
                "correct_answer": "William Shakespeare",
                "incorrect_answers": ["Charles Dickens", "Jane Austen", "Mark Twain"],
            },
            {
                "type": "boolean",
                "difficulty": "hard",
                "category": "Science &amp; Nature",
                "question": "The chemical symbol for gold is &#039;Au&#039;.",
                "correct_answer": "True",
                "incorrect_answers": ["False"],
            },
        ],
    }


# =============================================================================
# FIXTURES DE LOGGING
# =============================================================================


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificacao em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    return caplog
