# utils/model_client.py

"""
Gemini 호출 유틸리티

- 1단계(이미지 + 지시문)와 2단계(텍스트 프롬프트) 모두 여기서 호출한다.
- 입력: 모델 이름, 프롬프트, 최대 출력 토큰, (선택) 이미지 바이트
- 출력: 모델 응답 텍스트 그대로 (JSON 추출은 response_extractor 담당)
- 재시도/타임아웃 없음. 호출이 실패하면 예외가 그대로 올라간다.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from google import genai
from google.genai import types

from config import Settings, get_settings

logger = logging.getLogger(__name__)


class GeminiModelClient:
    """
    genai.Client 를 감싼 얇은 래퍼.
    analysis_service 는 generate_text() 만 알면 된다. (테스트에서는 가짜 클라이언트로 교체)
    """

    def __init__(self, client: Optional[Any] = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        if client is None:
            client = genai.Client(api_key=settings.require_api_key())
        self._client = client
        self._thinking_budget = settings.thinking_budget

    def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
        image_bytes: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
    ) -> Optional[str]:
        """
        프롬프트(와 이미지)를 보내고 응답 텍스트를 돌려준다.
        응답에 텍스트가 없으면 None.
        """
        contents: Union[str, List[Any]]
        if image_bytes is not None:
            # 지시문 + 인라인 이미지 두 파트
            contents = [
                prompt,
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            ]
        else:
            contents = prompt

        logger.debug(
            "Gemini 호출: model=%s, max_output_tokens=%d, image=%s",
            model,
            max_output_tokens,
            f"{len(image_bytes)} bytes" if image_bytes is not None else "none",
        )

        response = self._client.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(
                max_output_tokens=max_output_tokens,
                thinking_config=types.ThinkingConfig(thinking_budget=self._thinking_budget),
            ),
        )

        text = getattr(response, "text", None)
        if not text:
            logger.warning("Gemini 응답에 텍스트가 없습니다 (model=%s)", model)
        return text
