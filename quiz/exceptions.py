"""Quiz Exceptions - Hierarquia de erros do dominio."""

from typing import Any


class QuizError(Exception):
    """Erro base do quiz.

    Carrega a mensagem exibida ao cliente e detalhes opcionais
    (nunca dados sensiveis). ``status_code`` e usado pelo handler HTTP.
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RequestValidationFailed(QuizError):
    """Campos obrigatorios ausentes ou invalidos no request."""

    status_code = 400


class QuizNotFoundError(QuizError):
    """Nenhum registro encontrado para o email."""

    status_code = 404


class StorageError(QuizError):
    """Falha de conexao ou escrita no banco de documentos."""

    status_code = 500


class QuestionSourceError(QuizError):
    """Falha ao carregar perguntas do banco de questoes externo."""

    status_code = 502


class QuizApiError(QuizError):
    """Falha ao chamar o backend a partir do cliente."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code or 503


class QuizSessionError(QuizError):
    """Uso invalido da sessao de quiz (indice fora do intervalo, escolha invalida)."""

    status_code = 400


class InvalidTransitionError(QuizSessionError):
    """Transicao nao permitida no estado atual da sessao."""
