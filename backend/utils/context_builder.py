# utils/context_builder.py

"""
학습 컨텍스트 블록 구성

relevance_matcher 로 걸러낸 코퍼스 항목을 2단계 프롬프트에 붙일 텍스트로 만든다.

- 섹션별 고정 개수 상한 (토큰 예산이 아니라 개수로 자른다)
    * 어휘        : 20개
    * 기본 표현   : 15개 (표현당 연습문제 2개, 영작 정답이 있는 것만)
    * 생활 영어   : 10개 (주제당 20자 넘는 문장 3개)
- 걸린 항목이 없는 섹션은 아예 출력하지 않는다.
"""

from __future__ import annotations

import re
from typing import List, Sequence

from schemas.analysis import SampleData
from schemas.corpus import Expression, LifestyleTopic, VocabularyEntry
from utils.corpus_store import CorpusStore
from utils.relevance_matcher import (
    find_relevant_expressions,
    find_relevant_lifestyle,
    find_relevant_vocabulary,
)

MAX_CONTEXT_VOCABULARY = 20
MAX_CONTEXT_EXPRESSIONS = 15
MAX_EXERCISES_PER_EXPRESSION = 2
MAX_CONTEXT_LIFESTYLE = 10
MAX_SENTENCES_PER_TOPIC = 3
MIN_SENTENCE_LENGTH = 20

MAX_SAMPLE_VOCABULARY = 10
MAX_SAMPLE_EXPRESSIONS = 10
MAX_SAMPLE_LIFESTYLE = 5

CONTEXT_INTRO = (
    "다음은 영어 학습을 위한 참고 자료입니다. "
    "이 데이터를 참고하여 주어진 상황에 맞는 자연스러운 영어 예문들을 생성해주세요.\n\n"
)

_BREAK_MARKER = re.compile(r"<br\s*/?>", re.IGNORECASE)
_SENTENCE_END = re.compile(r"[.!?]+")


# ----------------------------
# 섹션 렌더링
# ----------------------------

def _render_vocabulary(entries: Sequence[VocabularyEntry]) -> str:
    lines: List[str] = ["=== 관련 어휘 ==="]
    for vocab in entries[:MAX_CONTEXT_VOCABULARY]:
        lines.append(f"- {vocab.word}: {vocab.word_meaning}")
        lines.append(f"  예문: {vocab.example.example_eng}")
        lines.append(f"  번역: {vocab.example.example_kor}")
        lines.append("")
    return "\n".join(lines) + "\n"


def _render_expressions(entries: Sequence[Expression]) -> str:
    lines: List[str] = ["=== 관련 기본 표현 ==="]
    for expr in entries[:MAX_CONTEXT_EXPRESSIONS]:
        lines.append(f"- {expr.kor_expression} → {expr.eng_expression}")
        lines.append(f"  예문: {expr.example}")
        for exercise in expr.basic_exercise_list[:MAX_EXERCISES_PER_EXPRESSION]:
            if not exercise.eng_sentence1:
                continue
            lines.append(f"  연습: {exercise.kor_sentence}")
            lines.append(f"  영작: {exercise.eng_sentence1}")
        lines.append("")
    return "\n".join(lines) + "\n"


def split_topic_sentences(content: str) -> List[str]:
    """
    생활 영어 본문 -> 문장 리스트 (<br> 제거, 20자 초과 문장만, 앞에서 3개)
    """
    text = _BREAK_MARKER.sub(" ", content or "")
    sentences = [s.strip() for s in _SENTENCE_END.split(text)]
    sentences = [s for s in sentences if len(s) > MIN_SENTENCE_LENGTH]
    return sentences[:MAX_SENTENCES_PER_TOPIC]


def _render_lifestyle(entries: Sequence[LifestyleTopic]) -> str:
    lines: List[str] = ["=== 관련 생활 영어 ==="]
    for topic in entries[:MAX_CONTEXT_LIFESTYLE]:
        lines.append(f"주제: {topic.eng_title} ({topic.kor_title})")
        for sentence in split_topic_sentences(topic.eng_content):
            lines.append(f"- {sentence}.")
        lines.append("")
    return "\n".join(lines) + "\n"


# ----------------------------
# Public API
# ----------------------------

def build_learning_context(
    store: CorpusStore,
    situation: str,
    detected_words: Sequence[str] = (),
) -> str:
    """
    상황 + 감지된 단어로 세 코퍼스를 걸러서 하나의 텍스트 블록으로 합친다.
    """
    context = CONTEXT_INTRO

    vocabulary = find_relevant_vocabulary(store, situation, detected_words)
    if vocabulary:
        context += _render_vocabulary(vocabulary)

    expressions = find_relevant_expressions(store, situation, detected_words)
    if expressions:
        context += _render_expressions(expressions)

    lifestyle = find_relevant_lifestyle(store, situation, detected_words)
    if lifestyle:
        context += _render_lifestyle(lifestyle)

    return context


def get_sample_data_for_situation(store: CorpusStore, situation: str) -> SampleData:
    """
    상황 하나에 대해 걸러진 원본 코퍼스 항목을 그대로 돌려준다. (확인/디버깅용)
    """
    return SampleData(
        vocabulary=find_relevant_vocabulary(store, situation)[:MAX_SAMPLE_VOCABULARY],
        expressions=find_relevant_expressions(store, situation)[:MAX_SAMPLE_EXPRESSIONS],
        lifestyle=find_relevant_lifestyle(store, situation)[:MAX_SAMPLE_LIFESTYLE],
    )
