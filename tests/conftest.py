from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict

import pytest


def build_tree(root: Path, files: Dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    def _make(files: Dict[str, str]) -> Path:
        return build_tree(tmp_path / "ws", files)

    return _make


@pytest.fixture
def workspace(make_tree) -> Path:
    return make_tree(
        {
            "a.txt": "hello",
            "b/c.txt": "world",
            "b/d.txt": "!",
        }
    )


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    yield
    logger = logging.getLogger("promptmyrepo")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
