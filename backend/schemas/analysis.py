# schemas/analysis.py

"""
이미지 분석 / 예문 생성 결과 스키마

- 1단계(Stage 1): 이미지 -> ExtractedWord 리스트 + SituationAnalysis
- 2단계(Stage 2): 상황 + 학습 컨텍스트 -> GeneratedExample 리스트 + Scenario
- 클라이언트(프론트)에는 camelCase 키로 내려간다. (model_dump(by_alias=True))

모든 필드는 기본값을 가지고 있어서, 모델 응답에서 일부 키가 빠져도
나머지 필드는 그대로 살린다. (utils/response_extractor.py 참고)
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .corpus import Expression, LifestyleTopic, VocabularyEntry

Difficulty = Literal["beginner", "intermediate", "advanced"]
DIFFICULTIES = ("beginner", "intermediate", "advanced")

# SituationAnalysis 가 비어 있을 때 쓰는 고정 문구
PLACEHOLDER_SITUATION = "분석된 상황이 없습니다"
PLACEHOLDER_CONTEXT = "분석된 맥락이 없습니다"

FALLBACK_SCENARIO_TITLE = "기본 상황극"
FALLBACK_SCENARIO_SITUATION = "일반적인 상황"


class AnalysisModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----------------------------
# Stage 1
# ----------------------------

class ExtractedWord(AnalysisModel):
    """이미지에서 찾은 영어 단어 하나. 좌표는 이미지 기준 픽셀."""

    word: str = Field(min_length=1)
    ko: Optional[str] = Field(default=None, description="모델이 붙여준 한국어 뜻 (선택)")
    x: float = 0
    y: float = 0
    confidence: Optional[float] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_in_range(cls, value):
        # 범위를 벗어나거나 숫자가 아니면 그냥 버린다
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not 0.0 <= value <= 1.0:
            return None
        return value


class SituationAnalysis(AnalysisModel):
    situation: str = PLACEHOLDER_SITUATION
    context: str = PLACEHOLDER_CONTEXT
    relevant_topics: List[str] = Field(default_factory=list)


# ----------------------------
# Stage 2
# ----------------------------

class GeneratedExample(AnalysisModel):
    english: str = Field(min_length=1)
    korean: str = ""
    situation: str = Field(default="", description="이 예문을 쓰는 상황 설명")
    difficulty: Difficulty

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class DialogueTurn(AnalysisModel):
    speaker: str = ""
    english: str = Field(min_length=1)
    korean: str = ""


def fallback_dialogue() -> List[DialogueTurn]:
    return [
        DialogueTurn(
            speaker="Person A",
            english="Hello, how are you?",
            korean="안녕하세요, 어떻게 지내세요?",
        ),
        DialogueTurn(
            speaker="Person B",
            english="I'm fine, thank you.",
            korean="잘 지내고 있습니다, 감사해요.",
        ),
    ]


def fallback_examples() -> List[GeneratedExample]:
    return [
        GeneratedExample(
            english="This looks interesting.",
            korean="이것은 흥미로워 보입니다.",
            situation=FALLBACK_SCENARIO_SITUATION,
            difficulty="beginner",
        )
    ]


class Scenario(AnalysisModel):
    title: str = FALLBACK_SCENARIO_TITLE
    situation: str = FALLBACK_SCENARIO_SITUATION
    # 상황극은 폴백이어도 최소 한 턴은 있어야 한다
    dialogue: List[DialogueTurn] = Field(default_factory=fallback_dialogue, min_length=1)


class Stage1Result(AnalysisModel):
    extracted_words: List[ExtractedWord] = Field(default_factory=list)
    situation_analysis: SituationAnalysis = Field(default_factory=SituationAnalysis)


class Stage2Result(AnalysisModel):
    generated_examples: List[GeneratedExample] = Field(default_factory=list)
    scenario: Scenario = Field(default_factory=Scenario)

    @classmethod
    def fallback(cls) -> "Stage2Result":
        """모델 응답에서 JSON 을 못 건졌을 때 돌려주는 고정 결과."""
        return cls(generated_examples=fallback_examples(), scenario=Scenario())


# ----------------------------
# 최종 결과
# ----------------------------

class SampleData(AnalysisModel):
    vocabulary: List[VocabularyEntry] = Field(default_factory=list)
    expressions: List[Expression] = Field(default_factory=list)
    lifestyle: List[LifestyleTopic] = Field(default_factory=list)


class AnalysisResult(AnalysisModel):
    extracted_words: List[ExtractedWord] = Field(default_factory=list)
    situation_analysis: SituationAnalysis = Field(default_factory=SituationAnalysis)
    generated_examples: List[GeneratedExample] = Field(default_factory=list)
    scenario: Scenario = Field(default_factory=Scenario)


class SituationExamplesResult(AnalysisResult):
    """텍스트 상황 입력 경로의 결과. 참고용 코퍼스 샘플이 함께 붙는다."""

    sample_data: SampleData = Field(default_factory=SampleData)
