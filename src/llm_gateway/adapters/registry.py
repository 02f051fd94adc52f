"""Build per-use-case adapter maps from settings."""

import logging
from typing import Callable, Dict, Optional, Sequence

from llm_gateway.adapters.base import AdapterConfig, ProviderAdapter
from llm_gateway.adapters.client import ProviderHTTPClient
from llm_gateway.adapters.shapes import (
    DeepSeekAdapter,
    GroqAdapter,
    OpenAIChatAdapter,
    OpenAIResponsesAdapter,
)
from llm_gateway.schemas import Provider
from llm_gateway.settings import (
    DeepSeekSettings,
    GroqSettings,
    OpenAISettings,
    Settings,
    get_deepseek_settings,
    get_groq_settings,
    get_openai_settings,
)

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[ProviderHTTPClient], ProviderAdapter]


def _client(settings: Settings) -> ProviderHTTPClient:
    return ProviderHTTPClient(
        connect_timeout_s=settings.connect_timeout_s,
        verify_ssl=settings.verify_ssl,
    )


def _build(order: Sequence[Provider],
           factories: Dict[Provider, AdapterFactory],
           settings: Settings) -> Dict[Provider, ProviderAdapter]:
    adapters: Dict[Provider, ProviderAdapter] = {}
    for provider in order:
        if provider in adapters:
            continue
        adapters[provider] = factories[provider](_client(settings))
    return adapters


def build_llm_adapters(settings: Settings,
                       deepseek: Optional[DeepSeekSettings] = None,
                       openai: Optional[OpenAISettings] = None,
                       groq: Optional[GroqSettings] = None,
                       order: Optional[Sequence[Provider]] = None) -> Dict[Provider, ProviderAdapter]:
    """
    Adapters for the general prompt router, keyed in configured priority order.

    OpenAI goes through the responses API here; DeepSeek and Groq through
    chat completions. `order` defaults to settings.llm_provider_order.
    """
    deepseek = deepseek or get_deepseek_settings()
    openai = openai or get_openai_settings()
    groq = groq or get_groq_settings()

    factories: Dict[Provider, AdapterFactory] = {
        Provider.DEEPSEEK: lambda client: DeepSeekAdapter(AdapterConfig(
            url=deepseek.url,
            model=deepseek.prompt_model,
            api_key=deepseek.api_key,
            key_env="DEEPSEEK_API_KEY",
            timeout_s=deepseek.timeout_s,
            temperature=deepseek.temperature,
            max_tokens=deepseek.max_tokens,
        ), client),
        Provider.OPENAI: lambda client: OpenAIResponsesAdapter(AdapterConfig(
            url=openai.responses_url,
            model=openai.prompt_model,
            api_key=openai.api_key,
            key_env="OPENAI_API_KEY",
            timeout_s=openai.timeout_s,
            temperature=openai.temperature,
            max_tokens=openai.max_output_tokens,
        ), client),
        Provider.GROQ: lambda client: GroqAdapter(AdapterConfig(
            url=groq.url,
            model=groq.prompt_model,
            api_key=groq.api_key,
            key_env="GROQ_API_KEY",
            timeout_s=groq.timeout_s,
            temperature=groq.temperature,
            max_tokens=groq.max_tokens,
        ), client),
    }
    adapters = _build(order or settings.llm_provider_order, factories, settings)
    logger.info(f"LLM adapters: {[p.value for p in adapters]}")
    return adapters


def build_chat_adapters(settings: Settings,
                        deepseek: Optional[DeepSeekSettings] = None,
                        openai: Optional[OpenAISettings] = None,
                        groq: Optional[GroqSettings] = None) -> Dict[Provider, ProviderAdapter]:
    """Prompt-model adapters for translation chat, in settings.chat_provider_order."""
    return build_llm_adapters(settings, deepseek, openai, groq, order=settings.chat_provider_order)


def build_translation_adapters(settings: Settings,
                               deepseek: Optional[DeepSeekSettings] = None,
                               openai: Optional[OpenAISettings] = None,
                               groq: Optional[GroqSettings] = None) -> Dict[Provider, ProviderAdapter]:
    """Chat-completions adapters with translation models and a low temperature."""
    deepseek = deepseek or get_deepseek_settings()
    openai = openai or get_openai_settings()
    groq = groq or get_groq_settings()
    temperature = settings.translation_temperature

    factories: Dict[Provider, AdapterFactory] = {
        Provider.DEEPSEEK: lambda client: DeepSeekAdapter(AdapterConfig(
            url=deepseek.url,
            model=deepseek.translation_model,
            api_key=deepseek.api_key,
            key_env="DEEPSEEK_API_KEY",
            timeout_s=deepseek.timeout_s,
            temperature=temperature,
            max_tokens=deepseek.max_tokens,
        ), client),
        Provider.GROQ: lambda client: GroqAdapter(AdapterConfig(
            url=groq.url,
            model=groq.translation_model,
            api_key=groq.api_key,
            key_env="GROQ_API_KEY",
            timeout_s=groq.timeout_s,
            temperature=temperature,
            max_tokens=groq.max_tokens,
        ), client),
        Provider.OPENAI: lambda client: OpenAIChatAdapter(AdapterConfig(
            url=openai.chat_url,
            model=openai.translation_model,
            api_key=openai.api_key,
            key_env="OPENAI_API_KEY",
            timeout_s=openai.timeout_s,
            temperature=temperature,
            max_tokens=openai.max_output_tokens,
        ), client),
    }
    adapters = _build(settings.translation_provider_order, factories, settings)
    logger.info(f"Translation adapters: {[p.value for p in adapters]}")
    return adapters
