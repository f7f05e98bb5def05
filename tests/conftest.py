from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo setup_logging() so a test's captured stderr isn't reused by the next one."""
    yield
    structlog.reset_defaults()
