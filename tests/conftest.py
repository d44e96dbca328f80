"""Pytest configuration for test isolation.

Settings are read from ``BANK_IMPORT_*`` environment variables (and the CLI
loads a local ``.env``). A developer's shell or ``.env`` must not change what
the tests see, so every test starts with those variables cleared.

The CLI configures the ``bank_import`` logger with ``propagate=False``; tests
that assert on log records use ``pkg_caplog``, which attaches pytest's capture
handler to the package logger directly.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any ``BANK_IMPORT_*`` variables inherited from the environment."""

    for name in list(os.environ):
        if name.startswith("BANK_IMPORT_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def pkg_caplog(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    logger = logging.getLogger("bank_import")
    previous = logger.level
    logger.addHandler(caplog.handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)
        logger.setLevel(previous)
