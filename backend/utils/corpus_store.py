# utils/corpus_store.py

"""
정적 학습 코퍼스 저장소

- 프로세스 시작 시 세 개의 JSON 파일을 한 번만 읽는다.
- 읽은 뒤에는 수정하지 않는다. (frozen 모델 + tuple)
  -> 여러 요청이 동시에 읽어도 락이 필요 없다.
- 파일 하나가 없거나 깨져 있으면 로그만 남기고 그 코퍼스만 비워 둔다.
  (서버 기동 자체를 막지 않는다)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from config import get_settings
from schemas.corpus import Expression, ExpressionLesson, LifestyleTopic, VocabularyEntry

logger = logging.getLogger(__name__)

VOCABULARY_FILE = "voca_10000.json"
EXPRESSION_FILE = "english_by_basic_sentence.json"
LIFESTYLE_FILE = "your_life_style.json"

T = TypeVar("T", bound=BaseModel)


def _load_corpus(path: Path, model: Type[T]) -> Tuple[T, ...]:
    """
    JSON 배열 하나를 model 튜플로 읽는다.
    실패하면 빈 튜플을 돌려주고 에러 로그를 남긴다.
    """
    try:
        raw = path.read_text(encoding="utf-8")
        items = TypeAdapter(Tuple[model, ...]).validate_json(raw)
    except FileNotFoundError:
        logger.error("코퍼스 파일이 없습니다: %s", path)
        return ()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("코퍼스 파일을 읽을 수 없습니다: %s (%s)", path, e)
        return ()
    except ValidationError as e:
        # JSON 문법 오류도 여기로 온다
        logger.error("코퍼스 파일 형식 오류: %s (%d errors)", path, e.error_count())
        return ()

    logger.info("코퍼스 로드 완료: %s (%d entries)", path.name, len(items))
    return items


class CorpusStore:
    """
    어휘 / 기본 문형 / 생활 영어 세 코퍼스를 들고 있는 읽기 전용 저장소.
    """

    def __init__(self, assets_dir: Union[str, Path]):
        self.assets_dir = Path(assets_dir)

        self._vocabulary = _load_corpus(self.assets_dir / VOCABULARY_FILE, VocabularyEntry)
        self._lessons = _load_corpus(self.assets_dir / EXPRESSION_FILE, ExpressionLesson)
        self._lifestyle = _load_corpus(self.assets_dir / LIFESTYLE_FILE, LifestyleTopic)

        # 문형은 레슨 순서 -> 표현 순서로 펼쳐 둔다
        self._expressions: Tuple[Expression, ...] = tuple(
            expr for lesson in self._lessons for expr in lesson.expression_list
        )

    @property
    def vocabulary(self) -> Tuple[VocabularyEntry, ...]:
        return self._vocabulary

    @property
    def lessons(self) -> Tuple[ExpressionLesson, ...]:
        return self._lessons

    @property
    def expressions(self) -> Tuple[Expression, ...]:
        return self._expressions

    @property
    def lifestyle(self) -> Tuple[LifestyleTopic, ...]:
        return self._lifestyle

    def __repr__(self) -> str:
        return (
            f"CorpusStore(vocabulary={len(self._vocabulary)}, "
            f"expressions={len(self._expressions)}, lifestyle={len(self._lifestyle)})"
        )


# ----------------------------
# 프로세스 전역 인스턴스
# ----------------------------

_STORE: Optional[CorpusStore] = None


def get_corpus_store() -> CorpusStore:
    """처음 호출될 때 설정된 assets 디렉터리에서 코퍼스를 읽는다."""
    global _STORE
    if _STORE is None:
        _STORE = CorpusStore(get_settings().assets_dir)
    return _STORE


def set_corpus_store(store: Optional[CorpusStore]) -> None:
    global _STORE
    _STORE = store
