# config.py

"""
서비스 설정 모음

- .env / 환경변수에서 값을 읽어 Settings 하나로 묶는다.
- GOOGLE_API_KEY 는 Gemini 클라이언트를 만들 때만 필요하다.
  (코퍼스 매칭/컨텍스트 구성 로직은 키 없이도 동작해야 테스트가 편하다)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_ASSETS_DIR = Path(__file__).resolve().parent / "assets"


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


class Settings(BaseModel):
    google_api_key: Optional[str] = Field(default=None, description="Gemini API 키")

    # 1단계(이미지 분석) / 2단계(예문 생성) 모델
    analysis_model: str = "models/gemini-2.5-flash"
    generation_model: str = "models/gemini-2.5-flash"

    stage1_max_output_tokens: int = 2000
    stage2_max_output_tokens: int = 3000

    # gemini-2.5 는 생각 토큰도 max_output_tokens 안에서 쓴다.
    # 위 한도로는 생각하다 최종 출력 없이 멈출 수 있어서 기본은 생각 끔(0).
    thinking_budget: int = 0

    assets_dir: Path = DEFAULT_ASSETS_DIR

    port: int = 5001
    cors_origin: str = "*"
    max_upload_mb: int = 20
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        assets_raw = (os.environ.get("LEARNING_ASSETS_DIR") or "").strip()

        return cls(
            google_api_key=os.environ.get("GOOGLE_API_KEY") or None,
            analysis_model=os.environ.get("GEMINI_ANALYSIS_MODEL") or defaults.analysis_model,
            generation_model=os.environ.get("GEMINI_GENERATION_MODEL") or defaults.generation_model,
            stage1_max_output_tokens=_env_int("STAGE1_MAX_OUTPUT_TOKENS", defaults.stage1_max_output_tokens),
            stage2_max_output_tokens=_env_int("STAGE2_MAX_OUTPUT_TOKENS", defaults.stage2_max_output_tokens),
            thinking_budget=_env_int("GEMINI_THINKING_BUDGET", defaults.thinking_budget, minimum=0),
            assets_dir=Path(assets_raw) if assets_raw else defaults.assets_dir,
            port=_env_int("PORT", defaults.port),
            cors_origin=(os.environ.get("CORS_ORIGIN") or defaults.cors_origin).strip(),
            max_upload_mb=_env_int("MAX_UPLOAD_MB", defaults.max_upload_mb),
            log_level=(os.environ.get("LOG_LEVEL") or defaults.log_level).strip().upper(),
        )

    def require_api_key(self) -> str:
        if not self.google_api_key:
            raise ValueError("GOOGLE_API_KEY 환경변수가 없습니다. .env 확인하세요.")
        return self.google_api_key


# 프로세스 전역 설정 (처음 접근할 때 환경변수에서 만든다)
_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def set_settings(settings: Optional[Settings]) -> None:
    """테스트에서 환경변수를 건드리지 않고 설정을 바꿀 때 사용."""
    global _SETTINGS
    _SETTINGS = settings
