"""Shared fixtures for tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from bookscroll.chunking.policy import SegmentationPolicy
from bookscroll.config import AppConfig
from bookscroll.library.shelf import Shelf
from bookscroll.library.storage import Storage


@pytest.fixture(autouse=True)
def _isolate_env():
    """load_dotenv writes into os.environ; undo it after each test."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("BOOKSCROLL_")}
    for key in saved:
        del os.environ[key]
    yield
    for key in [k for k in os.environ if k.startswith("BOOKSCROLL_")]:
        del os.environ[key]
    os.environ.update(saved)


@pytest.fixture
def storage(tmp_path: Path) -> Storage:
    store = Storage(tmp_path / "test.db")
    yield store
    store.close()


@pytest.fixture
def shelf(storage: Storage) -> Shelf:
    return Shelf(storage)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )


@pytest.fixture
def policy() -> SegmentationPolicy:
    return SegmentationPolicy(soft_limit=500, hard_limit=900, min_paragraph_length=120)
