"""Question Bank - Adaptador para o Open Trivia DB."""

from __future__ import annotations

import html
import logging
import random
from typing import Any

import httpx
from pydantic import ValidationError

from ..exceptions import QuestionSourceError
from ..models.schemas import TriviaQuestion

logger = logging.getLogger(__name__)

OPENTDB_URL = "https://opentdb.com/api.php"

# response_code do Open Trivia DB
RESPONSE_CODES = {
    0: "success",
    1: "no results",
    2: "invalid parameter",
    3: "token not found",
    4: "token empty",
    5: "rate limit",
}


class OpenTriviaClient:
    """Busca perguntas no Open Trivia DB e normaliza para TriviaQuestion.

    Sem retry: qualquer falha (rede, status HTTP, JSON invalido,
    ``response_code`` diferente de 0) vira um unico QuestionSourceError.

    Example:
        >>> source = OpenTriviaClient()
        >>> questions = await source.fetch_questions(15)
    """

    def __init__(
        self,
        base_url: str = OPENTDB_URL,
        timeout: float = 10.0,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Inicializa o adaptador.

        Args:
            base_url: Endpoint ``api.php`` do banco de questoes
            timeout: Timeout HTTP em segundos
            rng: Gerador usado no embaralhamento (injetavel para testes)
            transport: Transport httpx alternativo (testes)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.rng = rng or random.Random()
        self._transport = transport

    async def fetch_questions(self, amount: int = 15) -> list[TriviaQuestion]:
        """Busca ``amount`` perguntas ja decodificadas e embaralhadas."""
        logger.info(f"Buscando {amount} perguntas no banco de questoes...")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(self.base_url, params={"amount": amount})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Banco de questoes respondeu {e.response.status_code}")
            raise QuestionSourceError(
                "Failed to load quiz questions",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Erro de rede ao buscar perguntas: {e}")
            raise QuestionSourceError("Failed to load quiz questions") from e
        except ValueError as e:
            logger.error("Resposta do banco de questoes nao e JSON valido")
            raise QuestionSourceError("Invalid response format from API") from e

        items = self._extract_results(data)
        questions = [self.normalize(item) for item in items]

        logger.info(f"{len(questions)} perguntas carregadas")
        return questions

    def _extract_results(self, data: Any) -> list[dict[str, Any]]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            logger.error(f"Formato de resposta invalido: {str(data)[:200]}")
            raise QuestionSourceError("Invalid response format from API")

        code = data.get("response_code", 0)
        if code != 0:
            reason = RESPONSE_CODES.get(code, "unknown")
            logger.error(f"Banco de questoes retornou response_code={code} ({reason})")
            raise QuestionSourceError(
                "Failed to load quiz questions",
                details={"response_code": code, "reason": reason},
            )

        if not data["results"]:
            raise QuestionSourceError("Failed to load quiz questions", details={"results": 0})

        return data["results"]

    def normalize(self, item: dict[str, Any]) -> TriviaQuestion:
        """Decodifica entidades HTML e embaralha as alternativas de um item."""
        try:
            correct = html.unescape(item["correct_answer"])
            choices = [html.unescape(a) for a in item["incorrect_answers"]]
            choices.append(correct)
            self.rng.shuffle(choices)

            return TriviaQuestion(
                question=html.unescape(item["question"]),
                correct_answer=correct,
                choices=choices,
                type=item.get("type", "multiple"),
                difficulty=item.get("difficulty", "medium"),
                category=html.unescape(item.get("category", "")),
            )
        except (KeyError, TypeError, ValidationError) as e:
            logger.error(f"Pergunta malformada no banco de questoes: {e}")
            raise QuestionSourceError("Invalid response format from API") from e
