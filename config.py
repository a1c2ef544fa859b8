# =============================================================================
# CONFIGURACAO DO TRIVIA QUIZ
# =============================================================================

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

# -----------------------------------------------------------------------------
# Valores padrao
# -----------------------------------------------------------------------------

DEFAULT_MONGODB_URI = "mongodb://localhost:27017"
DEFAULT_MONGODB_DB = "quiz_app"
DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_OPENTDB_URL = "https://opentdb.com/api.php"

# Quiz fixo: 15 perguntas, 30 minutos
QUESTION_COUNT = 15
QUIZ_DURATION = 30 * 60


class ConfigError(RuntimeError):
    """Configuracao obrigatoria ausente ou invalida."""


@dataclass(frozen=True)
class Settings:
    """Configuracao lida do ambiente (.env + variaveis do processo)."""

    mongodb_uri: str = DEFAULT_MONGODB_URI
    mongodb_db: str = DEFAULT_MONGODB_DB
    port: int | None = None
    host: str = "0.0.0.0"
    api_url: str = DEFAULT_API_URL
    opentdb_url: str = DEFAULT_OPENTDB_URL
    question_count: int = QUESTION_COUNT
    quiz_duration: int = QUIZ_DURATION
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} deve ser um inteiro, recebido: {raw!r}") from e


def load_settings() -> Settings:
    """Monta Settings a partir das variaveis de ambiente.

    PORT nao e validado aqui (apenas o servidor precisa dele), veja require_port().
    """
    raw_port = os.getenv("PORT")
    port = int(raw_port) if raw_port and raw_port.strip().isdigit() else None

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        mongodb_uri=os.getenv("MONGODB_URI", DEFAULT_MONGODB_URI),
        mongodb_db=os.getenv("MONGODB_DB", DEFAULT_MONGODB_DB),
        port=port,
        host=os.getenv("HOST", "0.0.0.0"),
        api_url=os.getenv("API_URL", DEFAULT_API_URL).rstrip("/"),
        opentdb_url=os.getenv("OPENTDB_URL", DEFAULT_OPENTDB_URL),
        question_count=_int_env("QUIZ_QUESTION_COUNT", QUESTION_COUNT),
        quiz_duration=_int_env("QUIZ_DURATION", QUIZ_DURATION),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def require_port() -> int:
    """Retorna a porta do servidor ou falha se PORT nao estiver definido."""
    raw_port = os.getenv("PORT")
    if not raw_port:
        raise ConfigError("PORT is not defined in environment variables")
    try:
        return int(raw_port)
    except ValueError as e:
        raise ConfigError(f"PORT deve ser um inteiro, recebido: {raw_port!r}") from e
