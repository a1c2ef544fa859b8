"""Quiz API Client - Chamadas HTTP do cliente para o backend."""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import QuizApiError
from .models.schemas import (
    LatestQuizEnvelope,
    QuizResponsesEnvelope,
    SubmitEmailResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class QuizApiClient:
    """Cliente async para a API REST do quiz.

    Uso como context manager para reaproveitar a conexao:

    Example:
        >>> async with QuizApiClient("http://localhost:5000/api") as api:
        ...     await api.submit_email("user@example.com")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            logger.warning("API_URL nao definido; usando caminhos relativos")
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> QuizApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Falha de rede em {method} {path}: {e}")
            raise QuizApiError("Network error while calling quiz API") from e

        if response.is_error:
            message = response.reason_phrase
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            logger.error(f"{method} {path} -> {response.status_code}: {message}")
            raise QuizApiError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"{method} {path} -> resposta nao e JSON valido")
            raise QuizApiError(
                "Invalid response from quiz API", status_code=502
            ) from e
        if not isinstance(data, dict):
            raise QuizApiError(
                "Invalid response from quiz API", status_code=502
            )
        return data

    def _parse(self, model: type[ModelT], data: dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Resposta da API fora do formato {model.__name__}: {e}")
            raise QuizApiError("Invalid response from quiz API", status_code=502) from e

    async def submit_email(self, email: str) -> SubmitEmailResponse:
        data = await self._request("POST", "/submit-email", json={"email": email})
        return self._parse(SubmitEmailResponse, data)

    async def submit_quiz(self, payload: SubmitQuizRequest) -> SubmitQuizResponse:
        data = await self._request(
            "POST", "/submit-quiz", json=payload.model_dump(mode="json", by_alias=True)
        )
        return self._parse(SubmitQuizResponse, data)

    async def get_latest_result(self, email: str) -> LatestQuizEnvelope:
        """Ultimo resultado do email. 404 sobe como QuizApiError(status_code=404)."""
        data = await self._request("GET", f"/quiz/{quote(email, safe='@')}/latest")
        return self._parse(LatestQuizEnvelope, data)

    async def get_results(self, email: str) -> QuizResponsesEnvelope:
        data = await self._request("GET", f"/quiz/{quote(email, safe='@')}")
        return self._parse(QuizResponsesEnvelope, data)
