"""Runtime configuration loaded from environment variables.

The scoring function reads everything it needs from the environment once,
at import time:
  - POSTGREST_URL / POSTGREST_API_KEY → HR schema over the PostgREST API
  - FIXTURE_PATH                      → JSON fixture loader (local runs)
  - OLLAMA_BASE_URL / LLM_MODEL       → optional narrative summarizer
"""

from __future__ import annotations

import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Data access
    POSTGREST_URL: str = os.getenv("POSTGREST_URL", "http://localhost:3000")
    POSTGREST_API_KEY: str = os.getenv("POSTGREST_API_KEY", "")
    FIXTURE_PATH: str = os.getenv("FIXTURE_PATH", "")
    FETCH_TIMEOUT_S: float = float(os.getenv("FETCH_TIMEOUT_S", "10"))

    # Progress reporting: "log" or "postgrest"
    PROGRESS_SINK: str = os.getenv("PROGRESS_SINK", "log")

    # Narrative summarizer
    LLM_ENABLED: bool = _flag("LLM_ENABLED", "false")
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "llama3.1:8b")
    LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "120"))

    # Narrative shaping
    TOP_N_SUMMARY: int = int(os.getenv("TOP_N_SUMMARY", "5"))


settings = Settings()
