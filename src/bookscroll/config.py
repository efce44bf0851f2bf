"""Configuration management via .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from bookscroll.errors import ConfigurationError


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class AppConfig:
    # Paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "bookscroll")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "bookscroll")
    db_path: Path = field(init=False)
    log_path: Path = field(init=False)

    # Chunking (characters). Only affects granularity, never correctness.
    chunk_soft_limit: int = 500
    chunk_hard_limit: int = 900
    min_paragraph_length: int = 120

    # Seconds allowed for fetching a remote cover image
    cover_timeout: float = 30.0

    def __post_init__(self) -> None:
        self.validate()
        self.db_path = self.data_dir / "bookscroll.db"
        self.log_path = self.data_dir / "bookscroll.log"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def validate(self) -> None:
        for name in ("chunk_soft_limit", "chunk_hard_limit", "min_paragraph_length"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.chunk_hard_limit < self.chunk_soft_limit:
            raise ConfigurationError(
                f"chunk_hard_limit ({self.chunk_hard_limit}) must be >= "
                f"chunk_soft_limit ({self.chunk_soft_limit})"
            )
        if self.cover_timeout <= 0:
            raise ConfigurationError("cover_timeout must be positive")


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def load_config(env_path: Optional[Path] = None, **overrides) -> AppConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "bookscroll" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    values = {
        "chunk_soft_limit": _env_number("BOOKSCROLL_CHUNK_SOFT_LIMIT", 500),
        "chunk_hard_limit": _env_number("BOOKSCROLL_CHUNK_HARD_LIMIT", 900),
        "min_paragraph_length": _env_number("BOOKSCROLL_MIN_PARAGRAPH_LENGTH", 120),
        "cover_timeout": _env_number("BOOKSCROLL_COVER_TIMEOUT", 30.0, float),
    }
    values.update(overrides)
    return AppConfig(**values)
