"""Unit tests for review request validation and review generation."""
import json

import pytest
from pydantic import ValidationError

from llm_gateway.errors import ProviderTimeoutError
from llm_gateway.review.output_contract import DecisionType
from llm_gateway.review.schemas import GenerateReviewRequest, validation_messages
from llm_gateway.review.service import (
    PROMPT_VERSION,
    ReviewService,
    build_prompts,
    build_taste_evidence,
)
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.schemas import Provider


def review_payload(**overrides):
    payload = {
        "titleId": "tt0111161",
        "title": {"titleId": "tt0111161", "title": "The Shawshank Redemption", "year": 1994,
                  "genres": ["Drama"], "runtimeMinutes": 142},
        "spoilerMode": "non-spoiler",
        "tasteSnapshot": {"version": "v7", "signals": {"pace": "slow"}},
        "tasteAnchors": [{"anchorId": "a1", "label": "Prison dramas", "weight": 0.8, "evidence": ["Escape from Alcatraz"]}],
        "userRatings": [{"titleId": "tt0068646", "rating": 9}],
        "contradictions": {"unresolvedCount": 0, "examples": []},
        "drift": {"trend": "stable", "signals": []},
        "interactions": {"views": 3, "skips": 1, "saves": 0, "likes": 2, "listAdds": 1},
    }
    payload.update(overrides)
    return payload


def llm_service(*adapters, min_review_words=500):
    router = ProviderRouter({a.provider: a for a in adapters}, [a.provider for a in adapters])
    return ReviewService(router, min_review_words=min_review_words)


class TestGenerateReviewRequest:

    def test_camel_case_payload(self):
        request = GenerateReviewRequest.model_validate(review_payload())
        assert request.resolved_title_id == "tt0111161"
        assert request.spoiler_mode == "non-spoiler"
        assert request.interactions.total_review_interactions == 7

    def test_snake_case_payload(self):
        request = GenerateReviewRequest.model_validate({
            "title_id": "tt1",
            "spoiler_mode": "SPOILER",
            "taste_snapshot": {"version": "v1"},
            "taste_anchors": [],
            "user_ratings": [],
            "contradictions": {"unresolved_count": 0, "examples": []},
            "drift": {"signals": []},
            "interactions": {"views": 0, "skips": 0, "saves": 0, "likes": 0, "list_adds": 0},
            "provider": "DeepSeek",
        })
        assert request.spoiler_mode == "spoiler"
        assert request.provider == "deepseek"

    def test_title_id_required(self):
        payload = review_payload()
        del payload["titleId"], payload["title"]
        with pytest.raises(ValidationError):
            GenerateReviewRequest.model_validate(payload)

    def test_too_many_anchors(self):
        anchors = [{"anchorId": f"a{i}", "label": "x", "weight": 1} for i in range(51)]
        with pytest.raises(ValidationError):
            GenerateReviewRequest.model_validate(review_payload(tasteAnchors=anchors))

    def test_contradiction_count_must_match(self):
        with pytest.raises(ValidationError) as excinfo:
            GenerateReviewRequest.model_validate(
                review_payload(contradictions={"unresolvedCount": 2, "examples": [{}]})
            )
        assert any("unresolved_count must match" in m for m in validation_messages(excinfo.value))

    def test_all_messages_reported(self):
        with pytest.raises(ValidationError) as excinfo:
            GenerateReviewRequest.model_validate({"titleId": "tt1", "spoilerMode": "maybe"})
        messages = validation_messages(excinfo.value)
        assert len(messages) >= 6
        assert any("spoiler" in m.lower() for m in messages)

    def test_can_speak_must_be_boolean(self):
        with pytest.raises(ValidationError):
            GenerateReviewRequest.model_validate(review_payload(gateState={"canSpeak": "yes"}))


class TestPrompts:

    def test_non_spoiler_prompt(self):
        request = GenerateReviewRequest.model_validate(review_payload())
        system, text = build_prompts(build_taste_evidence(request), 500)

        assert "Return JSON only" in system
        assert "at least 500 words" in system
        assert "MODE POLICY: non-spoiler" in system
        assert f"PROMPT_VERSION: {PROMPT_VERSION}" in text
        evidence = json.loads(text.splitlines()[-1])
        assert evidence["title"]["titleId"] == "tt0111161"
        assert evidence["interactions"]["totalReviewInteractions"] == 7

    def test_spoiler_prompt(self):
        request = GenerateReviewRequest.model_validate(review_payload(spoilerMode="spoiler"))
        system, text = build_prompts(build_taste_evidence(request))
        assert "MODE POLICY: spoiler" in system
        assert "REVIEW_MODE: spoiler" in text


class TestReviewService:

    def test_closed_gate_is_silence_without_calls(self, make_adapter, call_log):
        svc = llm_service(make_adapter(Provider.DEEPSEEK))
        request = GenerateReviewRequest.model_validate(
            review_payload(gateState={"canSpeak": False, "reason": "Not enough ratings"})
        )
        outcome = svc.generate(request, "t")

        assert outcome.status_code == 200
        assert outcome.data.as_dict() == {
            "decisionType": "SILENCE", "confidence": 0.0, "silenceReason": "Not enough ratings",
        }
        assert call_log == []

    def test_decision_from_provider(self, make_adapter):
        answer = '```json\n{"decision_type": "ASK_LIGHT_QUESTION", "confidence": 0.64, "light_question": "Q?"}\n```'
        deepseek = make_adapter(Provider.DEEPSEEK, answer)
        outcome = llm_service(deepseek).generate(GenerateReviewRequest.model_validate(review_payload()), "t")

        assert outcome.status_code == 200
        assert outcome.data.decision_type is DecisionType.ASK_LIGHT_QUESTION
        assert outcome.provider is Provider.DEEPSEEK
        sent = deepseek.requests[0]
        assert sent.metadata["promptVersion"] == PROMPT_VERSION
        assert sent.metadata["titleId"] == "tt0111161"
        assert sent.system.startswith("You are a film and TV taste engine.")

    def test_short_speak_is_502(self, make_adapter):
        answer = json.dumps({"decision_type": "SPEAK", "confidence": 0.9, "review_text": "Great film."})
        outcome = llm_service(make_adapter(Provider.OPENAI, answer)).generate(
            GenerateReviewRequest.model_validate(review_payload()), "t"
        )
        assert outcome.status_code == 502
        assert outcome.errors == ["review_text must be at least 500 words for SPEAK"]
        assert outcome.data is None

    def test_forced_provider_timeout_is_504(self, make_adapter, call_log):
        svc = llm_service(make_adapter(Provider.DEEPSEEK),
                          make_adapter(Provider.OPENAI, ProviderTimeoutError("slow")))
        outcome = svc.generate(GenerateReviewRequest.model_validate(review_payload(provider="openai")), "t")
        assert outcome.status_code == 504
        assert call_log == ["openai"]

    def test_provider_not_configured(self, make_adapter):
        svc = llm_service(make_adapter(Provider.DEEPSEEK))
        outcome = svc.generate(GenerateReviewRequest.model_validate(review_payload(provider="openai")), "t")
        assert outcome.status_code == 400

    def test_unexpected_adapter_error_is_500(self, make_adapter):
        svc = llm_service(make_adapter(Provider.DEEPSEEK, RuntimeError("boom")))
        outcome = svc.generate(GenerateReviewRequest.model_validate(review_payload(provider="deepseek")), "t")
        assert outcome.status_code == 500
        assert outcome.errors == ["Unexpected error while generating review"]
        assert outcome.data is None
