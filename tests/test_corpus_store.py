import pydantic
import pytest

from utils.corpus_store import (
    EXPRESSION_FILE,
    LIFESTYLE_FILE,
    CorpusStore,
    get_corpus_store,
    set_corpus_store,
)
from config import Settings, set_settings

from conftest import LESSONS, LIFESTYLE, VOCABULARY, write_corpora


def test_loads_all_three_corpora(store):
    assert [v.word for v in store.vocabulary] == [v["word"] for v in VOCABULARY]
    assert len(store.lessons) == 2
    assert len(store.lifestyle) == 2
    assert store.vocabulary[0].example.example_eng == "I drink coffee every morning."


def test_expressions_are_flattened_in_lesson_order(store):
    assert [e.eng_expression for e in store.expressions] == [
        "Can I get ~?",
        "How much is ~?",
        "I'd like to ~",
    ]
    assert store.expressions[0].basic_exercise_list[0].eng_sentence1 == "Can I get a latte?"


def test_missing_directory_leaves_every_corpus_empty(empty_store):
    assert empty_store.vocabulary == ()
    assert empty_store.expressions == ()
    assert empty_store.lifestyle == ()


def test_missing_file_only_empties_that_corpus(tmp_path):
    directory = write_corpora(tmp_path / "assets", VOCABULARY, None, LIFESTYLE)

    store = CorpusStore(directory)

    assert len(store.vocabulary) == len(VOCABULARY)
    assert store.expressions == ()
    assert len(store.lifestyle) == len(LIFESTYLE)


def test_malformed_files_are_skipped(tmp_path, caplog):
    directory = write_corpora(tmp_path / "assets", VOCABULARY, LESSONS, None)
    (directory / LIFESTYLE_FILE).write_text("{not json", encoding="utf-8")
    (directory / EXPRESSION_FILE).write_text('{"lesson_title": "not a list"}', encoding="utf-8")

    with caplog.at_level("ERROR"):
        store = CorpusStore(directory)

    assert len(store.vocabulary) == len(VOCABULARY)
    assert store.lessons == ()
    assert store.lifestyle == ()
    assert "코퍼스 파일 형식 오류" in caplog.text


def test_entries_are_immutable(store):
    entry = store.vocabulary[0]
    with pytest.raises(pydantic.ValidationError):
        entry.word = "tea"
    assert isinstance(store.lessons[0].expression_list, tuple)


def test_process_wide_store_is_created_once(assets_dir):
    set_settings(Settings(assets_dir=assets_dir))
    set_corpus_store(None)
    try:
        first = get_corpus_store()
        assert first is get_corpus_store()
        assert len(first.vocabulary) == len(VOCABULARY)
    finally:
        set_corpus_store(None)
        set_settings(None)


def test_shipped_corpora_sit_next_to_config():
    from config import DEFAULT_ASSETS_DIR

    shipped = CorpusStore(DEFAULT_ASSETS_DIR)

    assert shipped.vocabulary
    assert shipped.expressions
    assert shipped.lifestyle
