# prompts.py
"""
Gemini 프롬프트 템플릿

- 1단계: 이미지 분석 지시문 (고정 문자열)
- 2단계: 학습 컨텍스트 + 상황 분석 -> 예문 8개 + 상황극 생성 요청
- 사용자/결과물이 한국어 학습자 대상이므로 프롬프트도 한국어로 작성한다.
"""

from __future__ import annotations

from typing import Sequence

from schemas.analysis import SituationAnalysis

# 2단계에서 요청하는 난이도별 예문 개수 (초급 3, 중급 3, 고급 2)
EXAMPLE_COUNTS = {"beginner": 3, "intermediate": 3, "advanced": 2}


# ----------------------------------------------------------------------
#   1단계: 이미지 분석
# ----------------------------------------------------------------------

IMAGE_ANALYSIS_PROMPT = """이미지를 분석해서 다음 정보를 JSON 형태로 제공해주세요:

1. 이미지에서 보이는 모든 영어 단어나 텍스트를 추출하고, 각 단어의 대략적인 위치 좌표(x, y)를 이미지 크기 기준 픽셀로 표시
2. 이미지의 상황/맥락을 분석하여 어떤 상황인지, 어떤 주제와 관련이 있는지 설명

응답 형식:
{
  "extractedWords": [
    {
      "word": "영어단어",
      "ko": "한국어 단어",
      "x": 50,
      "y": 30,
      "confidence": 0.9
    }
  ],
  "situationAnalysis": {
    "situation": "상황 설명",
    "context": "맥락 설명",
    "relevantTopics": ["관련주제1", "관련주제2"]
  }
}

모든 텍스트는 한국어로 작성하되, 추출된 영어 단어는 원문 그대로 유지해주세요."""


# ----------------------------------------------------------------------
#   2단계: 예문 + 상황극 생성
# ----------------------------------------------------------------------

_RESPONSE_FORMAT_BLOCK = """응답 형식:
{
  "generatedExamples": [
    {
      "english": "영어 예문",
      "korean": "한국어 번역",
      "situation": "사용 상황 설명",
      "difficulty": "beginner|intermediate|advanced"
    }
  ],
  "scenario": {
    "title": "시나리오 제목",
    "situation": "시나리오 상황 설명",
    "dialogue": [
      {
        "speaker": "Customer|Staff|Person A|Person B 등",
        "english": "영어 대사",
        "korean": "한국어 번역"
      }
    ]
  }
}"""


def _requirements_block() -> str:
    beginner = EXAMPLE_COUNTS["beginner"]
    intermediate = EXAMPLE_COUNTS["intermediate"]
    advanced = EXAMPLE_COUNTS["advanced"]
    total = beginner + intermediate + advanced

    return f"""요구사항:
1. 초급자용 {beginner}개, 중급자용 {intermediate}개, 고급자용 {advanced}개 총 {total}개의 예문 생성
2. 각 예문은 해당 상황에서 실제로 사용할 수 있는 자연스러운 표현
3. 제공된 학습 자료의 패턴과 어휘를 참고하되, 완전히 같을 필요는 없음
4. 각 예문에 한국어 번역 포함
5. 해당 상황에서 일어날 법한 상황극 시나리오 1개 생성 (3-4번의 대화 주고받기)"""


def build_generation_prompt(
    learning_context: str,
    analysis: SituationAnalysis,
    detected_words: Sequence[str],
) -> str:
    """
    2단계 프롬프트.

    Parameters
    ----------
    learning_context : str
        utils.context_builder.build_learning_context() 결과
    analysis : SituationAnalysis
        1단계 결과 또는 텍스트 입력으로 만든 상황 분석
    detected_words : Sequence[str]
        이미지에서 감지된 단어 (텍스트 입력 경로에서는 빈 리스트)
    """
    return f"""{learning_context}

위의 영어 학습 자료를 참고하여, 다음 상황에 맞는 실용적인 영어 예문들을 생성해주세요:

상황: {analysis.situation}
맥락: {analysis.context}
관련 주제: {", ".join(analysis.relevant_topics)}
감지된 단어들: {", ".join(detected_words)}

{_requirements_block()}

{_RESPONSE_FORMAT_BLOCK}"""
