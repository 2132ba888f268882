from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

from exam_tutor.constants import (
    CLAUDE_ANALYSIS_MODEL,
    DEFAULT_HISTORY_DIR,
    OPENAI_ANALYSIS_MODEL,
)


@dataclass(frozen=True)
class Config:
    anthropic_api_key: Optional[str]
    openai_api_key: Optional[str]
    log_level: str
    history_dir: Path
    history_quota_bytes: Optional[int]
    claude_model: str
    openai_model: str

    @classmethod
    def from_env(cls, require_api_key: bool = True) -> "Config":
        load_dotenv()

        anthropic_api_key = os.getenv("ANTHROPIC_API_KEY") or None
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        log_level = os.getenv("LOG_LEVEL", "INFO")
        history_dir = os.getenv("HISTORY_DIR", DEFAULT_HISTORY_DIR)
        raw_quota = os.getenv("HISTORY_QUOTA_BYTES") or None
        claude_model = os.getenv("CLAUDE_MODEL") or CLAUDE_ANALYSIS_MODEL
        openai_model = os.getenv("OPENAI_MODEL") or OPENAI_ANALYSIS_MODEL

        return cls._validate(
            require_api_key=require_api_key,
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            log_level=log_level,
            history_dir=Path(history_dir),
            raw_quota=raw_quota,
            claude_model=claude_model,
            openai_model=openai_model,
        )

    @staticmethod
    def _validate(
        require_api_key: bool,
        anthropic_api_key: Optional[str],
        openai_api_key: Optional[str],
        log_level: str,
        history_dir: Path,
        raw_quota: Optional[str],
        claude_model: str,
        openai_model: str,
    ) -> "Config":
        match (require_api_key, anthropic_api_key, openai_api_key):
            case (True, None, None):
                raise ValueError("ANTHROPIC_API_KEY or OPENAI_API_KEY must be set in .env")
            case _:
                pass

        match raw_quota:
            case None:
                quota = None
            case text if text.strip().isdigit() and int(text) > 0:
                quota = int(text)
            case _:
                raise ValueError("HISTORY_QUOTA_BYTES must be a positive integer")

        return Config(
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            log_level=log_level,
            history_dir=history_dir,
            history_quota_bytes=quota,
            claude_model=claude_model,
            openai_model=openai_model,
        )
