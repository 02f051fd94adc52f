"""Unit tests for translation chat."""
import pytest

from llm_gateway.errors import InvalidRequestError, ProviderTimeoutError
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.routing.translation_chat import (
    TranslationChatService,
    build_transcript,
    normalize_turn,
    validate_chat_payload,
)
from llm_gateway.schemas import Provider, RouterError

ALL = [Provider.DEEPSEEK, Provider.OPENAI, Provider.GROQ]


def service(*adapters):
    router = ProviderRouter(
        {a.provider: a for a in adapters},
        [a.provider for a in adapters],
        label="translation_chat",
    )
    return TranslationChatService(router)


class TestValidateChatPayload:

    @pytest.mark.parametrize("payload", [None, {}, {"messages": []}, {"messages": "hi"},
                                         {"messages": [{"content": "   "}, 3]}])
    def test_messages_required(self, payload):
        with pytest.raises(InvalidRequestError) as e:
            validate_chat_payload(payload, ALL)
        assert e.value.errors == ["messages[] required"]

    def test_defaults_to_deepseek(self):
        request = validate_chat_payload({"messages": [{"role": "user", "content": "hi"}]}, ALL)
        assert request.provider == Provider.DEEPSEEK
        assert request.system is None

    def test_legacy_ai_provider(self):
        request = validate_chat_payload({"aiProvider": "GROQ", "messages": [{"content": "hi"}]}, ALL)
        assert request.provider == Provider.GROQ

    def test_provider_wins_over_ai_provider(self):
        request = validate_chat_payload(
            {"provider": "openai", "aiProvider": "groq", "messages": [{"content": "hi"}]}, ALL
        )
        assert request.provider == Provider.OPENAI

    def test_unknown_provider(self):
        with pytest.raises(InvalidRequestError):
            validate_chat_payload({"provider": "mistral", "messages": [{"content": "hi"}]}, ALL)

    def test_custom_prompt_is_system(self):
        request = validate_chat_payload({"customPrompt": "  Reply in French ", "messages": [{"content": "hi"}]}, ALL)
        assert request.system == "Reply in French"

    def test_turns_normalized(self):
        request = validate_chat_payload(
            {"messages": [{"content": {"text": "hola"}}, {"role": "assistant", "content": ""},
                          {"role": "assistant", "content": "hello"}]},
            ALL,
        )
        assert request.turns == ({"role": "user", "content": "hola"}, {"role": "assistant", "content": "hello"})


class TestTranscript:

    def test_normalize_turn_without_text(self):
        assert normalize_turn({"role": "user", "content": 5}) is None
        assert normalize_turn("hi") is None

    def test_build_transcript(self):
        turns = [{"role": "user", "content": "hola"}, {"role": "assistant", "content": "hello"}]
        assert build_transcript(turns) == "user: hola\n\nassistant: hello"


class TestTranslationChatService:

    def test_reply(self, make_adapter):
        deepseek = make_adapter(Provider.DEEPSEEK, "Bonjour")
        out = service(deepseek, make_adapter(Provider.GROQ)).chat(
            {"messages": [{"role": "user", "content": "hello"}], "customPrompt": "French please"}, "t-1"
        )
        assert out == {"reply": "Bonjour", "traceId": "t-1", "aiProvider": "deepseek", "latency_ms": 12}
        sent = deepseek.requests[0]
        assert sent.provider == Provider.DEEPSEEK
        assert sent.system == "French please"
        assert sent.messages == ({"role": "user", "content": "hello"},)
        assert sent.input == "user: hello"

    def test_no_fallback(self, make_adapter, call_log):
        svc = service(make_adapter(Provider.DEEPSEEK, ProviderTimeoutError("slow")), make_adapter(Provider.GROQ))
        out = svc.chat({"messages": [{"content": "hello"}]}, "t")
        assert isinstance(out, RouterError)
        assert out.status_code == 504
        assert out.errors == ["DeepSeek request timed out; please try again later"]
        assert call_log == ["deepseek"]

    def test_invalid_request(self, make_adapter, call_log):
        out = service(make_adapter(Provider.DEEPSEEK)).chat({"messages": []}, "t")
        assert out.status_code == 400
        assert out.errors == ["messages[] required"]
        assert call_log == []

    def test_unexpected_error_is_500(self, make_adapter):
        out = service(make_adapter(Provider.DEEPSEEK, RuntimeError("boom"))).chat({"messages": [{"content": "x"}]}, "t")
        assert out.status_code == 500
        assert out.errors == ["Internal server error"]
