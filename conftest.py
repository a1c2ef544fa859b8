# =============================================================================
# CONFTEST - Pytest Fixtures Globais
# =============================================================================
# Ambiente de teste sem dependencias externas (sem MongoDB, sem Open Trivia DB)
# =============================================================================

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Adicionar root ao path
sys.path.insert(0, str(Path(__file__).parent))


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_env():
    """Configura variaveis de ambiente para testes."""
    env_vars = {
        "MONGODB_URI": "mongodb://localhost:27017",
        "MONGODB_DB": "quiz_test",
        "PORT": "5000",
        "API_URL": "http://test/api",
        "LOG_LEVEL": "ERROR",
    }
    with patch.dict(os.environ, env_vars):
        yield
