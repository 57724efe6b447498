# utils/relevance_matcher.py

"""
상황 문장 + 감지된 단어 -> 코퍼스 관련 항목 필터링

- 점수는 매기지 않는다. 관련 있음/없음만 본다.
- 결과 순서는 코퍼스 원래 순서 그대로.
- 매칭은 대소문자 무시, 양방향 부분 문자열:
    * 항목의 검색 텍스트가 키워드를 포함하거나
    * 키워드가 항목의 대표 단어/표현을 포함하면 관련 있음
      (예: 사용자가 "coffees" 를 넣어도 "coffee" 항목이 걸린다)
"""

from __future__ import annotations

import re
import string
from typing import Callable, Iterable, List, Sequence, Set, Tuple, TypeVar

from schemas.corpus import Expression, LifestyleTopic, VocabularyEntry
from utils.corpus_store import CorpusStore

T = TypeVar("T")


# ============================
#   한국어 상황 -> 영어 키워드
# ============================

KOREAN_KEYWORD_MAP = {
    "카페": ("cafe", "coffee", "drink", "order"),
    "식당": ("restaurant", "food", "eat", "meal", "order"),
    "학교": ("school", "study", "learn", "class", "student"),
    "회사": ("office", "work", "business", "meeting"),
    "집": ("home", "house", "family", "room"),
    "쇼핑": ("shopping", "buy", "store", "money"),
    "여행": ("travel", "trip", "vacation", "hotel"),
    "운동": ("exercise", "sport", "health", "fitness"),
    "요리": ("cooking", "food", "kitchen", "recipe"),
    "병원": ("hospital", "doctor", "health", "medicine"),
}

# 라틴 문자가 연속 두 글자 이상 있어야 영어 토큰으로 본다
_LATIN_WORD = re.compile(r"[A-Za-z]{2,}")
_TOKEN_STRIP = string.punctuation + "“”‘’…"


# ============================
#   내부 유틸 함수들
# ============================

def _normalize_keyword(word: str) -> str:
    return (word or "").strip().lower()


def _vocabulary_fields(entry: VocabularyEntry) -> Tuple[str, str]:
    search_text = " ".join(
        (entry.word, entry.word_meaning, entry.example.example_eng, entry.example.example_kor)
    )
    return search_text.lower(), entry.word.strip().lower()


def _expression_fields(expr: Expression) -> Tuple[str, str]:
    search_text = " ".join((expr.kor_expression, expr.eng_expression, expr.example))
    return search_text.lower(), expr.eng_expression.strip().lower()


def _lifestyle_fields(topic: LifestyleTopic) -> Tuple[str, str]:
    search_text = " ".join((topic.eng_title, topic.kor_title, topic.eng_content))
    return search_text.lower(), topic.eng_title.strip().lower()


def _is_relevant(search_text: str, primary: str, keywords: Set[str]) -> bool:
    for keyword in keywords:
        if keyword in search_text:
            return True
        # 빈 대표 단어는 모든 키워드에 포함되므로 역방향 매칭에서 제외
        if primary and primary in keyword:
            return True
    return False


def _filter(
    entries: Iterable[T],
    fields: Callable[[T], Tuple[str, str]],
    keywords: Set[str],
) -> List[T]:
    if not keywords:
        return []

    matched: List[T] = []
    for entry in entries:
        search_text, primary = fields(entry)
        if _is_relevant(search_text, primary, keywords):
            matched.append(entry)
    return matched


# ============================
#   Public API
# ============================

def extract_keywords(situation: str) -> Set[str]:
    """
    상황 문장에서 검색 키워드를 뽑는다.

    1) 공백 기준으로 나눈 토큰 중 영어 단어처럼 보이는 것 (앞뒤 문장부호 제거)
    2) 한국어 상황 단어가 들어 있으면 매핑된 영어 키워드 전부
    """
    situation = situation or ""
    keywords: Set[str] = set()

    for token in situation.lower().split():
        if not _LATIN_WORD.search(token):
            continue
        token = token.strip(_TOKEN_STRIP)
        if token:
            keywords.add(token)

    for korean, english_words in KOREAN_KEYWORD_MAP.items():
        if korean in situation:
            keywords.update(english_words)

    return keywords


def build_keywords(situation: str, detected_words: Sequence[str] = ()) -> Set[str]:
    keywords = {_normalize_keyword(w) for w in detected_words or ()}
    keywords.discard("")
    return keywords | extract_keywords(situation)


def find_relevant_vocabulary(
    store: CorpusStore,
    situation: str,
    detected_words: Sequence[str] = (),
) -> List[VocabularyEntry]:
    keywords = build_keywords(situation, detected_words)
    return _filter(store.vocabulary, _vocabulary_fields, keywords)


def find_relevant_expressions(
    store: CorpusStore,
    situation: str,
    detected_words: Sequence[str] = (),
) -> List[Expression]:
    keywords = build_keywords(situation, detected_words)
    return _filter(store.expressions, _expression_fields, keywords)


def find_relevant_lifestyle(
    store: CorpusStore,
    situation: str,
    detected_words: Sequence[str] = (),
) -> List[LifestyleTopic]:
    keywords = build_keywords(situation, detected_words)
    return _filter(store.lifestyle, _lifestyle_fields, keywords)
