"""Test harness configuration.

This repo uses a `src/` layout. Ensure tests always import the in-repo code
even when an older `ticketer` is installed.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import Callable

import pytest

DEFAULT_NON_INTEGRATION_TIMEOUT_SECONDS = 60


def pytest_configure() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_path = str(repo_root / "src")
    if sys.path[:1] != [src_path] and src_path not in sys.path:
        sys.path.insert(0, src_path)


def pytest_collection_modifyitems(
    session: pytest.Session, config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Apply a default per-test timeout (inert without pytest-timeout)."""
    _ = session, config
    for item in items:
        if item.get_closest_marker("integration") is not None:
            continue
        item.add_marker(pytest.mark.timeout(DEFAULT_NON_INTEGRATION_TIMEOUT_SECONDS))


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def space_dir(tmp_path: Path) -> Path:
    return tmp_path / "tickets"


@pytest.fixture()
def space(space_dir: Path):
    from ticketer.core.space import TicketSpace

    return TicketSpace(space_dir)


@pytest.fixture()
def age_file() -> Callable[[Path, float], None]:
    """Backdate a file's mtime by `seconds`."""

    def _age(path: Path, seconds: float) -> None:
        stamp = time.time() - seconds
        os.utime(path, (stamp, stamp))

    return _age


@pytest.fixture(autouse=True)
def _reset_ticketer_logger():
    yield
    logger = logging.getLogger("ticketer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
