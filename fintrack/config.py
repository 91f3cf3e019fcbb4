"""Configuration for the finance tracker.

Paths, assistant credentials and logging defaults come from environment
variables, optionally loaded from a ``.env`` file at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_LANGUAGE = "English"
STORE_FILENAME = "fintrack.json"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    store_path: Path
    openai_api_key: Optional[str] = None
    assistant_model: str = DEFAULT_MODEL
    assistant_temperature: float = DEFAULT_TEMPERATURE
    assistant_language: str = DEFAULT_LANGUAGE
    log_level: str = "INFO"

    @property
    def assistant_enabled(self) -> bool:
        return bool(self.openai_api_key)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Build ``Settings`` from the environment.

    ``env_file`` is passed to ``python-dotenv``; values already present in the
    environment take precedence over the file.
    """
    load_dotenv(env_file)

    data_dir = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))
    store_path = Path(os.getenv("FINTRACK_STORE_PATH", data_dir / STORE_FILENAME))

    return Settings(
        data_dir=data_dir.resolve(),
        store_path=store_path.resolve(),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        assistant_model=os.getenv("FINTRACK_ASSISTANT_MODEL", DEFAULT_MODEL),
        assistant_temperature=_float_env("FINTRACK_ASSISTANT_TEMPERATURE", DEFAULT_TEMPERATURE),
        assistant_language=os.getenv("FINTRACK_ASSISTANT_LANGUAGE", DEFAULT_LANGUAGE),
        log_level=os.getenv("FINTRACK_LOG_LEVEL", "INFO"),
    )


def ensure_data_directory(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
