# utils/response_extractor.py

"""
모델의 자유 형식 응답 텍스트 -> 구조화된 결과

Gemini 응답에는 JSON 앞뒤로 설명 문장이나 ```json 펜스가 붙어 오는 경우가 많다.
정규식 `\\{[\\s\\S]*\\}` 로 첫 '{' 부터 마지막 '}' 까지 잡으면
JSON 뒤에 중괄호가 하나 더 있을 때 엉뚱한 범위를 잡으므로,
중괄호 깊이를 세면서 완결된 최상위 객체 단위로 잘라낸다.

파싱 실패 처리:
- 응답 자체가 비어 있음       -> EmptyModelResponseError (1, 2단계 모두 치명적)
- JSON 범위를 못 찾음          -> 1단계: JSONNotFoundError / 2단계: 고정 폴백
- JSON 이 깨짐                 -> 1단계: 필드 전부 기본값 / 2단계: 고정 폴백
- 일부 키가 없거나 형식이 틀림 -> 해당 필드만 기본값 (나머지는 살린다)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from schemas.analysis import (
    DialogueTurn,
    ExtractedWord,
    GeneratedExample,
    Scenario,
    SituationAnalysis,
    Stage1Result,
    Stage2Result,
    fallback_dialogue,
)

logger = logging.getLogger(__name__)

# 모델 응답에서 이 이상 깊게 중첩된 객체는 정상 응답으로 보지 않는다
MAX_JSON_DEPTH = 64

M = TypeVar("M", bound=BaseModel)


class EmptyModelResponseError(RuntimeError):
    """모델 응답에 텍스트가 전혀 없음."""


class JSONNotFoundError(ValueError):
    """응답 텍스트 안에 {...} 범위가 없음."""


class MalformedJSONError(ValueError):
    """{...} 범위는 있지만 JSON 객체로 파싱되지 않음."""


# ----------------------------
# 1. JSON 범위 찾기
# ----------------------------

def _span_end(text: str, start: int) -> Tuple[int, bool]:
    """
    text[start] 의 '{' 가 닫히는 위치와 깊이 제한 초과 여부.
    끝까지 닫히지 않으면 -1.
    """
    depth = 0
    in_string = False
    escaped = False
    too_deep = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
            if depth > MAX_JSON_DEPTH:
                too_deep = True
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i, too_deep

    return -1, too_deep


def find_json_spans(text: str) -> Iterator[str]:
    """
    text 안의 완결된 최상위 {...} 범위를 앞에서부터 차례로 돌려준다.

    - 문자열 리터럴 안의 중괄호/이스케이프는 깊이 계산에서 뺀다.
    - 끝까지 닫히지 않는 '{' 는 건너뛰고 바로 다음 글자부터 다시 찾는다.
    - 깊이가 MAX_JSON_DEPTH 를 넘는 범위는 닫히는 곳까지 통째로 버린다. (안쪽 객체도 돌려주지 않음)
    """
    text = text or ""
    pos = 0

    while True:
        start = text.find("{", pos)
        if start < 0:
            return

        end, too_deep = _span_end(text, start)
        if end < 0:
            pos = start + 1
            continue

        if too_deep:
            logger.warning("JSON nesting deeper than %d; span discarded", MAX_JSON_DEPTH)
        else:
            yield text[start : end + 1]
        pos = end + 1


def extract_json_object(text: str) -> dict:
    """
    text 에서 JSON 객체로 파싱되는 첫 번째 범위를 dict 로 돌려준다.
    """
    found_span = False
    last_error: Optional[Exception] = None

    for span in find_json_spans(text):
        found_span = True
        try:
            value = json.loads(span)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        if isinstance(value, dict):
            return value

    if not found_span:
        raise JSONNotFoundError("응답에서 JSON 을 찾을 수 없습니다")
    raise MalformedJSONError(f"응답의 JSON 을 파싱할 수 없습니다: {last_error}")


# ----------------------------
# 2. 필드별 기본값 디코딩
# ----------------------------

def _decode_list(raw: Any, model: Type[M], field: str) -> List[M]:
    """리스트 필드: 형식이 틀린 항목만 버리고 나머지는 살린다."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("'%s' 필드가 리스트가 아님, 빈 리스트 사용", field)
        return []

    items: List[M] = []
    dropped = 0
    for item in raw:
        try:
            items.append(model.model_validate(item))
        except ValidationError:
            dropped += 1
    if dropped:
        logger.warning("'%s' 항목 %d개 형식 오류로 제외", field, dropped)
    return items


def _decode_situation_analysis(raw: Any) -> SituationAnalysis:
    if not isinstance(raw, dict):
        return SituationAnalysis()

    defaults = SituationAnalysis()
    situation = raw.get("situation")
    context = raw.get("context")
    topics = raw.get("relevantTopics", raw.get("relevant_topics"))

    return SituationAnalysis(
        situation=situation if isinstance(situation, str) and situation.strip() else defaults.situation,
        context=context if isinstance(context, str) and context.strip() else defaults.context,
        relevant_topics=[t for t in topics if isinstance(t, str)] if isinstance(topics, list) else [],
    )


def _decode_scenario(raw: Any) -> Scenario:
    if not isinstance(raw, dict):
        return Scenario()

    defaults = Scenario()
    title = raw.get("title")
    situation = raw.get("situation")
    dialogue = _decode_list(raw.get("dialogue"), DialogueTurn, "scenario.dialogue")

    return Scenario(
        title=title if isinstance(title, str) and title.strip() else defaults.title,
        situation=situation if isinstance(situation, str) and situation.strip() else defaults.situation,
        dialogue=dialogue or fallback_dialogue(),
    )


def _require_content(text: Optional[str]) -> str:
    if text is None or not text.strip():
        raise EmptyModelResponseError("모델 응답이 비어있습니다")
    return text


# ----------------------------
# 3. Public API
# ----------------------------

def parse_stage1_response(text: Optional[str]) -> Stage1Result:
    """
    1단계(이미지 분석) 응답 파싱.
    JSON 자체를 못 찾으면 예외, 그 외에는 필드 단위로 기본값을 채운다.
    """
    content = _require_content(text)

    try:
        data = extract_json_object(content)
    except MalformedJSONError as e:
        logger.warning("1단계 응답 JSON 파싱 실패, 기본값 사용: %s", e)
        return Stage1Result()

    return Stage1Result(
        extracted_words=_decode_list(data.get("extractedWords"), ExtractedWord, "extractedWords"),
        situation_analysis=_decode_situation_analysis(data.get("situationAnalysis")),
    )


def parse_stage2_response(text: Optional[str]) -> Stage2Result:
    """
    2단계(예문 생성) 응답 파싱.
    JSON 을 못 찾거나 깨져 있으면 고정 폴백(예문 1개 + 대화 2턴)을 돌려준다.
    """
    content = _require_content(text)

    try:
        data = extract_json_object(content)
    except (JSONNotFoundError, MalformedJSONError) as e:
        logger.warning("2단계 응답 파싱 실패, 기본 예문 사용: %s", e)
        return Stage2Result.fallback()

    return Stage2Result(
        generated_examples=_decode_list(
            data.get("generatedExamples"), GeneratedExample, "generatedExamples"
        ),
        scenario=_decode_scenario(data.get("scenario")),
    )
