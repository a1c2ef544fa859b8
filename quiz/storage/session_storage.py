"""Session Storage - Armazenamento chave-valor transitorio do cliente."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Chaves usadas entre as telas
USER_EMAIL_KEY = "userEmail"
QUIZ_RESULTS_KEY = "quizResults"


class SessionStorage:
    """Armazenamento por processo, equivalente ao sessionStorage do navegador.

    Valores sao guardados como strings; ``set_json``/``get_json`` fazem a
    serializacao. Nada e persistido em disco.
    """

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))

    def get_json(self, key: str) -> Any | None:
        """Le e desserializa um valor; JSON invalido retorna None."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Valor invalido em session storage: {key}")
            return None
