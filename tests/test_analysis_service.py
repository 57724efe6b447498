import json

import pytest

from analysis_service import AnalysisService, merge_detected_words
from prompts import IMAGE_ANALYSIS_PROMPT
from schemas.analysis import PLACEHOLDER_SITUATION, Stage2Result
from utils.response_extractor import EmptyModelResponseError, JSONNotFoundError

from conftest import FakeModelClient


STAGE1_RESPONSE = "분석 결과입니다.\n" + json.dumps(
    {
        "extractedWords": [
            {"word": "Coffee", "ko": "커피", "x": 120, "y": 40, "confidence": 0.95},
            {"word": "Order", "x": 10, "y": 300},
        ],
        "situationAnalysis": {
            "situation": "카페 주문대 앞",
            "context": "손님이 음료를 주문하려고 메뉴판을 보고 있음",
            "relevantTopics": ["카페", "주문"],
        },
    },
    ensure_ascii=False,
)

STAGE2_RESPONSE = "```json\n" + json.dumps(
    {
        "generatedExamples": [
            {"english": "Can I get a latte?", "korean": "라떼 주세요.", "situation": "주문", "difficulty": "beginner"},
            {"english": "I'd like it iced.", "korean": "아이스로 주세요.", "situation": "주문", "difficulty": "intermediate"},
            {"english": "Could you make it half-sweet?", "korean": "덜 달게 해주세요.", "situation": "주문", "difficulty": "advanced"},
        ],
        "scenario": {
            "title": "카페 주문",
            "situation": "카운터에서 주문하기",
            "dialogue": [
                {"speaker": "Staff", "english": "What can I get you?", "korean": "뭘 드릴까요?"},
                {"speaker": "Customer", "english": "A latte, please.", "korean": "라떼 주세요."},
                {"speaker": "Staff", "english": "Hot or iced?", "korean": "따뜻한 걸로요, 아이스로요?"},
            ],
        },
    },
    ensure_ascii=False,
) + "\n```"


def make_service(store, settings, *responses):
    client = FakeModelClient(*responses)
    return AnalysisService(client, corpus_store=store, settings=settings), client


def test_image_flow_runs_two_sequential_calls(store, settings):
    service, client = make_service(store, settings, STAGE1_RESPONSE, STAGE2_RESPONSE)

    result = service.analyze_image(b"\xff\xd8jpeg-bytes", mime_type="image/png")

    assert [w.word for w in result.extracted_words] == ["Coffee", "Order"]
    assert result.situation_analysis.situation == "카페 주문대 앞"
    assert [e.difficulty for e in result.generated_examples] == ["beginner", "intermediate", "advanced"]
    assert len(result.scenario.dialogue) == 3

    stage1, stage2 = client.calls
    assert stage1["model"] == "test-vision-model"
    assert stage1["prompt"] == IMAGE_ANALYSIS_PROMPT
    assert stage1["image_bytes"] == b"\xff\xd8jpeg-bytes"
    assert stage1["mime_type"] == "image/png"
    assert stage1["max_output_tokens"] == 2000

    assert stage2["model"] == "test-text-model"
    assert stage2["image_bytes"] is None
    assert stage2["max_output_tokens"] == 3000


def test_stage2_prompt_carries_context_and_analysis(store, settings):
    service, client = make_service(store, settings, STAGE1_RESPONSE, STAGE2_RESPONSE)

    service.analyze_image(b"img")

    prompt = client.calls[1]["prompt"]
    # detected words pull matching corpus entries into the context block
    assert "- coffee: 커피" in prompt
    assert "상황: 카페 주문대 앞" in prompt
    assert "맥락: 손님이 음료를 주문하려고 메뉴판을 보고 있음" in prompt
    assert "관련 주제: 카페, 주문" in prompt
    assert "감지된 단어들: Coffee, Order" in prompt
    assert "초급자용 3개, 중급자용 3개, 고급자용 2개 총 8개" in prompt
    # coordinates are not forwarded
    assert "120" not in prompt


def test_detected_word_hints_are_merged(store, settings):
    service, client = make_service(store, settings, STAGE1_RESPONSE, STAGE2_RESPONSE)

    service.analyze_image(b"img", detected_word_hints=["order", "doctor"])

    prompt = client.calls[1]["prompt"]
    assert "감지된 단어들: Coffee, Order, doctor" in prompt
    assert "- doctor: 의사" in prompt


def test_merge_detected_words_keeps_first_spelling():
    assert merge_detected_words(["Menu", " ", "Tea"], ["menu", "TEA", "cake", ""]) == ["Menu", "Tea", "cake"]


def test_stage1_placeholder_still_proceeds_to_stage2(store, settings):
    stage1 = 'here is data {"extractedWords":[],"situationAnalysis":{}}'
    service, client = make_service(store, settings, stage1, STAGE2_RESPONSE)

    result = service.analyze_image(b"img")

    assert result.extracted_words == []
    assert result.situation_analysis.situation == PLACEHOLDER_SITUATION
    assert len(client.calls) == 2


def test_empty_stage1_response_fails_the_request(store, settings, caplog):
    service, client = make_service(store, settings, None)

    with pytest.raises(EmptyModelResponseError):
        service.analyze_image(b"img")

    assert len(client.calls) == 1
    assert "stage=stage1_requested" in caplog.text


def test_stage1_without_json_fails_the_request(store, settings):
    service, client = make_service(store, settings, "no structured data")

    with pytest.raises(JSONNotFoundError):
        service.analyze_image(b"img")
    assert len(client.calls) == 1


def test_external_call_errors_propagate_without_retry(store, settings):
    service, client = make_service(store, settings, STAGE1_RESPONSE, ConnectionError("boom"))

    with pytest.raises(ConnectionError):
        service.analyze_image(b"img")
    assert len(client.calls) == 2


def test_stage2_without_json_uses_fallback(store, settings):
    service, _ = make_service(store, settings, STAGE1_RESPONSE, "I cannot produce JSON today.")

    result = service.analyze_image(b"img")

    assert result.generated_examples == Stage2Result.fallback().generated_examples
    assert len(result.scenario.dialogue) == 2


def test_direct_situation_skips_stage1(store, settings):
    service, client = make_service(store, settings, STAGE2_RESPONSE)

    result = service.generate_examples_for_situation("shopping")

    assert len(client.calls) == 1
    assert client.calls[0]["image_bytes"] is None
    assert result.extracted_words == []
    assert result.situation_analysis.situation == "shopping"
    assert result.situation_analysis.context == "shopping 관련 상황"
    assert result.situation_analysis.relevant_topics == ["shopping"]
    assert [v.word for v in result.sample_data.vocabulary] == ["mall"]
    assert len(result.generated_examples) == 3

    prompt = client.calls[0]["prompt"]
    assert "감지된 단어들: \n" in prompt
    assert "- mall: 쇼핑몰" in prompt


def test_direct_situation_result_shape(store, settings):
    service, _ = make_service(store, settings, STAGE2_RESPONSE)

    dumped = service.generate_examples_for_situation("카페에서 커피를 주문하고 싶어요").model_dump(by_alias=True)

    assert set(dumped) == {"extractedWords", "situationAnalysis", "generatedExamples", "scenario", "sampleData"}
    assert set(dumped["sampleData"]) == {"vocabulary", "expressions", "lifestyle"}
    assert dumped["sampleData"]["vocabulary"][0]["word_meaning"] == "커피"


def test_direct_situation_with_no_corpus_matches(empty_store, settings):
    service, client = make_service(empty_store, settings, STAGE2_RESPONSE)

    result = service.generate_examples_for_situation("something unusual")

    assert result.sample_data.vocabulary == []
    assert result.sample_data.expressions == []
    assert result.sample_data.lifestyle == []
    assert "=== 관련" not in client.calls[0]["prompt"]
