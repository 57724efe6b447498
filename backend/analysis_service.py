# analysis_service.py

"""
이미지 분석 + 학습 데이터 기반 예문 생성 파이프라인

이미지 경로:
    Start -> Stage1Requested -> Stage1Parsed -> ContextBuilt
          -> Stage2Requested -> Stage2Parsed -> Done
    (어느 단계에서든 예외가 나면 Errored, 예외는 그대로 위로 올린다)

텍스트 상황 경로:
    1단계를 건너뛰고 상황 분석을 직접 만든 뒤 ContextBuilt 부터 진행한다.

- 2단계는 1단계 결과가 있어야 시작할 수 있으므로 두 호출은 항상 순차적이다.
- 요청끼리 공유하는 것은 읽기 전용 CorpusStore 뿐이다.
- 재시도 / 타임아웃 / 취소는 없다.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from config import Settings, get_settings
from prompts import IMAGE_ANALYSIS_PROMPT, build_generation_prompt
from schemas.analysis import (
    AnalysisResult,
    SituationAnalysis,
    SituationExamplesResult,
    Stage1Result,
    Stage2Result,
)
from utils.context_builder import build_learning_context, get_sample_data_for_situation
from utils.corpus_store import CorpusStore, get_corpus_store
from utils.model_client import GeminiModelClient
from utils.response_extractor import parse_stage1_response, parse_stage2_response

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    START = "start"
    STAGE1_REQUESTED = "stage1_requested"
    STAGE1_PARSED = "stage1_parsed"
    CONTEXT_BUILT = "context_built"
    STAGE2_REQUESTED = "stage2_requested"
    STAGE2_PARSED = "stage2_parsed"
    DONE = "done"
    ERRORED = "errored"


class ModelClient(Protocol):
    def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
        image_bytes: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
    ) -> Optional[str]:
        ...


def merge_detected_words(extracted: Sequence[str], hints: Sequence[str] = ()) -> List[str]:
    """
    1단계에서 뽑은 단어 + 클라이언트가 준 힌트 단어.
    순서는 유지하고, 대소문자만 다른 중복은 앞의 것만 남긴다.
    """
    merged: List[str] = []
    seen = set()
    for word in list(extracted) + list(hints or ()):
        word = (word or "").strip()
        key = word.lower()
        if not word or key in seen:
            continue
        seen.add(key)
        merged.append(word)
    return merged


class _StageTracker:
    """요청 하나의 진행 단계를 기록한다. (로그용)"""

    def __init__(self, request_kind: str):
        self.request_kind = request_kind
        self.stage = PipelineStage.START

    def advance(self, stage: PipelineStage) -> None:
        logger.debug("[%s] %s -> %s", self.request_kind, self.stage.value, stage.value)
        self.stage = stage

    def fail(self, error: BaseException) -> None:
        logger.error(
            "[%s] 파이프라인 실패 (stage=%s): %s",
            self.request_kind,
            self.stage.value,
            error,
        )
        self.stage = PipelineStage.ERRORED


class AnalysisService:
    def __init__(
        self,
        model_client: ModelClient,
        corpus_store: Optional[CorpusStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.model_client = model_client
        self.corpus_store = corpus_store or get_corpus_store()
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_image(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        detected_word_hints: Sequence[str] = (),
    ) -> AnalysisResult:
        """이미지 -> 단어/상황 분석 -> 학습 컨텍스트 -> 예문 + 상황극"""
        tracker = _StageTracker("analyze-image")
        try:
            tracker.advance(PipelineStage.STAGE1_REQUESTED)
            stage1 = self._run_stage1(image_bytes, mime_type)
            tracker.advance(PipelineStage.STAGE1_PARSED)

            # 좌표/신뢰도는 컨텍스트 구성에 넘기지 않는다
            detected_words = merge_detected_words(
                [w.word for w in stage1.extracted_words],
                detected_word_hints,
            )
            learning_context = build_learning_context(
                self.corpus_store,
                stage1.situation_analysis.situation,
                detected_words,
            )
            tracker.advance(PipelineStage.CONTEXT_BUILT)

            tracker.advance(PipelineStage.STAGE2_REQUESTED)
            stage2 = self._run_stage2(stage1.situation_analysis, detected_words, learning_context)
            tracker.advance(PipelineStage.STAGE2_PARSED)
        except Exception as e:
            tracker.fail(e)
            raise

        tracker.advance(PipelineStage.DONE)
        logger.info(
            "이미지 분석 완료: words=%d, examples=%d, dialogue_turns=%d",
            len(stage1.extracted_words),
            len(stage2.generated_examples),
            len(stage2.scenario.dialogue),
        )

        return AnalysisResult(
            extracted_words=stage1.extracted_words,
            situation_analysis=stage1.situation_analysis,
            generated_examples=stage2.generated_examples,
            scenario=stage2.scenario,
        )

    def generate_examples_for_situation(self, situation: str) -> SituationExamplesResult:
        """이미지 없이 상황 문장만으로 예문 생성. 참고한 코퍼스 샘플도 같이 돌려준다."""
        tracker = _StageTracker("generate-examples")
        analysis = SituationAnalysis(
            situation=situation,
            context=f"{situation} 관련 상황",
            relevant_topics=[situation],
        )

        try:
            learning_context = build_learning_context(self.corpus_store, situation)
            sample_data = get_sample_data_for_situation(self.corpus_store, situation)
            tracker.advance(PipelineStage.CONTEXT_BUILT)

            tracker.advance(PipelineStage.STAGE2_REQUESTED)
            stage2 = self._run_stage2(analysis, [], learning_context)
            tracker.advance(PipelineStage.STAGE2_PARSED)
        except Exception as e:
            tracker.fail(e)
            raise

        tracker.advance(PipelineStage.DONE)
        logger.info(
            "상황 예문 생성 완료: examples=%d, sample(vocab=%d, expr=%d, life=%d)",
            len(stage2.generated_examples),
            len(sample_data.vocabulary),
            len(sample_data.expressions),
            len(sample_data.lifestyle),
        )

        return SituationExamplesResult(
            situation_analysis=analysis,
            generated_examples=stage2.generated_examples,
            scenario=stage2.scenario,
            sample_data=sample_data,
        )

    # ------------------------------------------------------------------
    # 단계별 호출
    # ------------------------------------------------------------------

    def _run_stage1(self, image_bytes: bytes, mime_type: str) -> Stage1Result:
        text = self.model_client.generate_text(
            model=self.settings.analysis_model,
            prompt=IMAGE_ANALYSIS_PROMPT,
            max_output_tokens=self.settings.stage1_max_output_tokens,
            image_bytes=image_bytes,
            mime_type=mime_type,
        )
        return parse_stage1_response(text)

    def _run_stage2(
        self,
        analysis: SituationAnalysis,
        detected_words: Sequence[str],
        learning_context: str,
    ) -> Stage2Result:
        prompt = build_generation_prompt(learning_context, analysis, detected_words)
        text = self.model_client.generate_text(
            model=self.settings.generation_model,
            prompt=prompt,
            max_output_tokens=self.settings.stage2_max_output_tokens,
        )
        return parse_stage2_response(text)


# ----------------------------
# 프로세스 전역 인스턴스
# ----------------------------

_SERVICE: Optional[AnalysisService] = None


def get_analysis_service() -> AnalysisService:
    """Gemini 클라이언트는 실제로 요청이 들어올 때 처음 만든다."""
    global _SERVICE
    if _SERVICE is None:
        _SERVICE = AnalysisService(GeminiModelClient())
    return _SERVICE
