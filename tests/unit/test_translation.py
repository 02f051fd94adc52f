"""Unit tests for the translation router."""
import json

import pytest

from llm_gateway.errors import InvalidRequestError, UpstreamError
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.routing.translation import (
    TRANSLATION_SYSTEM_PROMPT,
    UNAVAILABLE_MESSAGE,
    TranslationService,
    build_translation_prompt,
    merge_context,
    to_canonical_translation,
    validate_translation_payload,
)
from llm_gateway.schemas import Provider, RouterError

ALL = [Provider.DEEPSEEK, Provider.GROQ, Provider.OPENAI]


def service(*adapters):
    router = ProviderRouter(
        {a.provider: a for a in adapters},
        [a.provider for a in adapters],
        unavailable_message=UNAVAILABLE_MESSAGE,
        label="translation",
    )
    return TranslationService(router)


class TestValidateTranslationPayload:

    def test_camel_case(self):
        request = validate_translation_payload(
            {"sourceText": "Bonjour", "targetLang": "en", "sourceLang": "fr", "customPrompt": "JSON"}, ALL
        )
        assert request.source_text == "Bonjour"
        assert request.target_lang == "en"
        assert request.source_lang == "fr"
        assert request.custom_prompt == "JSON"
        assert request.provider is None

    def test_snake_case_and_default_source_lang(self):
        request = validate_translation_payload({"source_text": "Hola", "target_lang": "de", "provider": "GROQ"}, ALL)
        assert request.source_lang == "auto"
        assert request.provider is Provider.GROQ

    def test_missing_source_text(self):
        with pytest.raises(InvalidRequestError, match="sourceText/source_text"):
            validate_translation_payload({"targetLang": "en"}, ALL)

    def test_missing_target_lang(self):
        with pytest.raises(InvalidRequestError, match="targetLang/target_lang"):
            validate_translation_payload({"sourceText": "x"}, ALL)

    def test_user_message_merged_into_context(self):
        request = validate_translation_payload(
            {"sourceText": "x", "targetLang": "en", "context": "Chat app", "user_message": "be casual"}, ALL
        )
        assert request.context == "Chat app\n\nuserMessage: be casual"

    def test_merge_context_empty(self):
        assert merge_context(None, "  ") is None


class TestPrompt:

    def test_sections_in_order(self):
        request = validate_translation_payload(
            {"sourceText": "Gato", "targetLang": "en", "context": "pets", "customPrompt": "Return JSON"}, ALL
        )
        prompt = build_translation_prompt(request)
        assert prompt == (
            "Context:\npets\n\n"
            "Source language: auto\n\n"
            "Target language: en\n\n"
            "Text:\nGato\n\n"
            "Output format rules:\nReturn JSON"
        )


class TestCanonicalTranslation:

    def test_plain_text_wrapped(self):
        assert json.loads(to_canonical_translation("Hello", "Bonjour")) == {
            "sourceText": "Bonjour", "translatedText": "Hello", "sourcePronunciation": "",
        }

    def test_fenced_object_keeps_keys(self):
        raw = '```json\n{"translatedText": "Hello", "notes": "formal"}\n```'
        assert json.loads(to_canonical_translation(raw, "Bonjour")) == {
            "translatedText": "Hello", "notes": "formal", "sourceText": "Bonjour", "sourcePronunciation": "",
        }

    def test_compact_and_unicode(self):
        out = to_canonical_translation("こんにちは", "hello")
        assert "こんにちは" in out
        assert ", " not in out and ": " not in out


class TestTranslationService:

    def test_fallback_to_groq(self, make_adapter, call_log):
        svc = service(
            make_adapter(Provider.DEEPSEEK, UpstreamError("DeepSeek HTTP 500")),
            make_adapter(Provider.GROQ, '{"translatedText": "Hello"}'),
            make_adapter(Provider.OPENAI),
        )
        body = svc.translate({"sourceText": "Bonjour", "targetLang": "en"}, "t-9")

        assert call_log == ["deepseek", "groq"]
        assert body["provider"] == "groq"
        assert body["model"] == "groq-model"
        assert body["trace_id"] == "t-9"
        assert body["detected_source_lang"] == "auto"
        assert body["raw_provider_meta"] == {"model": "groq-model", "usage": None, "id": "resp-1"}
        assert json.loads(body["translation"])["translatedText"] == "Hello"

    def test_system_prompt_sent(self, make_adapter):
        deepseek = make_adapter(Provider.DEEPSEEK, "Hi")
        service(deepseek).translate({"sourceText": "Salut", "targetLang": "en"}, "t")
        assert deepseek.requests[0].system == TRANSLATION_SYSTEM_PROMPT
        assert "Text:\nSalut" in deepseek.requests[0].input

    def test_all_fail(self, make_adapter):
        svc = service(*(make_adapter(p, UpstreamError("down")) for p in ALL))
        outcome = svc.translate({"sourceText": "x", "targetLang": "en"}, "t")
        assert isinstance(outcome, RouterError)
        assert outcome.status_code == 502
        assert outcome.errors == [UNAVAILABLE_MESSAGE]

    def test_forced_failure_names_provider(self, make_adapter, call_log):
        svc = service(make_adapter(Provider.DEEPSEEK), make_adapter(Provider.GROQ, UpstreamError("Groq HTTP 500")))
        outcome = svc.translate({"sourceText": "x", "targetLang": "en", "provider": "groq"}, "t")
        assert outcome.status_code == 502
        assert outcome.errors == ["Groq is currently unavailable; please try again later"]
        assert call_log == ["groq"]

    def test_invalid_payload_makes_no_calls(self, make_adapter, call_log):
        outcome = service(make_adapter(Provider.DEEPSEEK)).translate({"targetLang": "en"}, "t")
        assert outcome.status_code == 400
        assert call_log == []
