"""
Trivia Quiz Server

FastAPI backend for the trivia quiz:
- Email registration (idempotent)
- Quiz submission (append-only)
- Quiz history and latest result lookup
- MongoDB persistence via pymongo async client
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app_state
from config import ConfigError, load_settings, require_port
from quiz.exceptions import QuizError
from quiz.models.schemas import HealthResponse
from quiz.router import VALIDATION_MESSAGES
from quiz.router import router as quiz_router

# =============================================================================
# CONFIGURATION
# =============================================================================

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger("quiz.server")


# =============================================================================
# FASTAPI APP
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    logger.info("Starting Quiz Application API...")
    await app_state.connect(settings)
    yield
    await app_state.cleanup()


app = FastAPI(
    title="Quiz Application",
    description="Trivia quiz backend: emails, submissions and reports",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ERROR HANDLERS
# =============================================================================


@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    """Erros de dominio viram {"error": mensagem} com o status da excecao."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Campos ausentes/invalidos retornam 400 (nao 422)."""
    message = VALIDATION_MESSAGES.get(request.url.path, "Invalid request")
    logger.warning(f"Request invalido em {request.url.path}: {len(exc.errors())} erro(s)")
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Erro nao tratado em {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


# =============================================================================
# ROUTES
# =============================================================================

app.include_router(quiz_router)


@app.get("/", response_model=HealthResponse)
async def root():
    """Health check."""
    return HealthResponse()


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    try:
        port = require_port()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    uvicorn.run(app, host=settings.host, port=port)
