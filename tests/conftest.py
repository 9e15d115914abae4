from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def write_input(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a records file under tmp_path and return its path."""

    def _write(content: str, name: str = "projects.txt") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "public"


@pytest.fixture(autouse=True)
def _reset_goredirect_logger():
    """`configure_logging` disables propagation; restore it so caplog sees records."""
    yield
    logger = logging.getLogger("goredirect")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
