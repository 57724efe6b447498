import json

import pytest

from config import Settings
from utils.corpus_store import (
    EXPRESSION_FILE,
    LIFESTYLE_FILE,
    VOCABULARY_FILE,
    CorpusStore,
)


def vocab(word, meaning="", eng="", kor="", level="초급"):
    return {
        "word": word,
        "word_meaning": meaning,
        "example": {"example_eng": eng, "example_kor": kor},
        "level": level,
    }


def expression(kor, eng, example, exercises=()):
    return {
        "kor_expression": kor,
        "eng_expression": eng,
        "example": example,
        "basic_exercise_list": [
            {"kor_sentence": k, "eng_sentence1": e} for k, e in exercises
        ],
    }


def topic(eng_title, kor_title, eng_content, kor_content="", words=()):
    return {
        "eng_title": eng_title,
        "kor_title": kor_title,
        "eng_content": eng_content,
        "kor_content": kor_content,
        "words": [{"word": w, "mean": m} for w, m in words],
    }


VOCABULARY = [
    vocab("coffee", "커피", "I drink coffee every morning.", "나는 매일 아침 커피를 마신다."),
    vocab("apple", "사과", "She ate an apple.", "그녀는 사과를 먹었다."),
    vocab("order", "주문하다", "Are you ready to order?", "주문하시겠어요?"),
    vocab("mall", "쇼핑몰", "We went shopping at the mall.", "우리는 쇼핑몰에 쇼핑하러 갔다."),
    vocab("doctor", "의사", "I need to see a doctor.", "나는 의사에게 진찰을 받아야 한다."),
]

LESSONS = [
    {
        "lesson_title": "Lesson 1",
        "expression_list": [
            expression(
                "~ 주세요",
                "Can I get ~?",
                "Can I get an iced coffee?",
                [("라떼 주세요.", "Can I get a latte?"), ("메뉴판 주세요.", "")],
            ),
            expression("~는 얼마예요?", "How much is ~?", "How much is this shirt?"),
        ],
    },
    {
        "lesson_title": "Lesson 2",
        "expression_list": [
            expression("~하고 싶어요", "I'd like to ~", "I'd like to order a cake."),
        ],
    },
]

LIFESTYLE = [
    topic(
        "Ordering at a Cafe",
        "카페에서 주문하기",
        "Most cafes take your order at the counter.<br>You can choose the size of your coffee cup. "
        "Short one. Some people bring their own cup for a discount!",
    ),
    topic(
        "Weekend Shopping",
        "주말 쇼핑",
        "Shopping malls are really crowded on weekends. Make a list before you go out.",
    ),
]


def write_corpora(directory, vocabulary=None, lessons=None, lifestyle=None):
    directory.mkdir(parents=True, exist_ok=True)
    for name, data in (
        (VOCABULARY_FILE, vocabulary),
        (EXPRESSION_FILE, lessons),
        (LIFESTYLE_FILE, lifestyle),
    ):
        if data is not None:
            (directory / name).write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return directory


@pytest.fixture
def assets_dir(tmp_path):
    return write_corpora(tmp_path / "assets", VOCABULARY, LESSONS, LIFESTYLE)


@pytest.fixture
def store(assets_dir):
    return CorpusStore(assets_dir)


@pytest.fixture
def empty_store(tmp_path):
    return CorpusStore(tmp_path / "nothing-here")


@pytest.fixture
def settings(assets_dir):
    return Settings(
        google_api_key="test-key",
        analysis_model="test-vision-model",
        generation_model="test-text-model",
        assets_dir=assets_dir,
    )


class FakeModelClient:
    """Returns queued responses in order and records every call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def generate_text(self, *, model, prompt, max_output_tokens, image_bytes=None, mime_type="image/jpeg"):
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "max_output_tokens": max_output_tokens,
                "image_bytes": image_bytes,
                "mime_type": mime_type,
            }
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
