from __future__ import annotations

import pytest

from src.config.env_config import EnvConfig
from src.error_handling import initialize_error_handler
from src.errors import reset_error_handler_lazy


@pytest.fixture(autouse=True)
def _isolate_env_and_errors():
    """Fresh EnvConfig cache and error handler for every test."""
    EnvConfig.clear_cache()
    initialize_error_handler()
    reset_error_handler_lazy()
    yield
    EnvConfig.clear_cache()
    reset_error_handler_lazy()
