# schemas/corpus.py

"""
정적 학습 코퍼스 스키마

- voca_10000.json             -> VocabularyEntry 리스트
- english_by_basic_sentence.json -> ExpressionLesson 리스트
- your_life_style.json        -> LifestyleTopic 리스트

JSON 키 이름을 그대로 필드명으로 쓴다.
모든 모델은 frozen 이고 리스트는 tuple 로 들어간다. (로드 후 수정 불가)
"""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class CorpusModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ----------------------------
# 어휘 (voca_10000.json)
# ----------------------------

class VocabularyExample(CorpusModel):
    example_eng: str = ""
    example_kor: str = ""


class VocabularyEntry(CorpusModel):
    word: str
    word_meaning: str = ""
    example: VocabularyExample = Field(default_factory=VocabularyExample)
    level: str = ""


# ----------------------------
# 기본 문형 (english_by_basic_sentence.json)
# ----------------------------

class Exercise(CorpusModel):
    kor_sentence: str = ""
    # 영작 정답. 비어 있는 연습문제도 데이터에 섞여 있다.
    eng_sentence1: str = ""


class Expression(CorpusModel):
    kor_expression: str = ""
    eng_expression: str = ""
    example: str = ""
    basic_exercise_list: Tuple[Exercise, ...] = ()


class ExpressionLesson(CorpusModel):
    lesson_title: str = ""
    expression_list: Tuple[Expression, ...] = ()


# ----------------------------
# 생활 영어 (your_life_style.json)
# ----------------------------

class GlossWord(CorpusModel):
    word: str
    mean: str = ""


class LifestyleTopic(CorpusModel):
    eng_title: str = ""
    kor_title: str = ""
    # 본문에는 <br> 같은 줄바꿈 마커가 섞여 있다
    eng_content: str = ""
    kor_content: str = ""
    words: Tuple[GlossWord, ...] = ()
