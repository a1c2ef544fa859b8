"""Quiz Sources - Bancos de questoes externos."""

from .question_bank import OpenTriviaClient

__all__ = ["OpenTriviaClient"]
