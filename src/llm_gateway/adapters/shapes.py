"""
Request shapes and the concrete provider adapters.

Chat-completions providers (DeepSeek, Groq, OpenAI chat) take a flat
`messages` array; the OpenAI responses API takes an `input` composition and
`max_output_tokens`. This difference stays inside the adapters. Groq gets a
multi-turn conversation as one `role: content` transcript message.
"""

from typing import Any, Dict, List

from llm_gateway.adapters.base import HTTPProviderAdapter
from llm_gateway.schemas import Provider, RouteRequest


def _messages(request: RouteRequest, join_turns: bool = False) -> List[Dict[str, str]]:
    """System message first, then either the conversation turns or one user message."""
    messages = []
    if request.system:
        messages.append({"role": "system", "content": request.system})
    if request.messages and not join_turns:
        messages.extend(dict(turn) for turn in request.messages)
    else:
        messages.append({"role": "user", "content": request.input})
    return messages


class ChatCompletionsAdapter(HTTPProviderAdapter):
    # send multi-turn conversations as one flattened user message
    join_turns = False

    def build_payload(self, request: RouteRequest) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "messages": _messages(request, self.join_turns),
        }


class ResponsesAdapter(HTTPProviderAdapter):
    def build_payload(self, request: RouteRequest) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "input": _messages(request),
            "temperature": self.config.temperature,
            "max_output_tokens": self.config.max_tokens,
        }


class DeepSeekAdapter(ChatCompletionsAdapter):
    provider = Provider.DEEPSEEK


class GroqAdapter(ChatCompletionsAdapter):
    provider = Provider.GROQ
    join_turns = True


class OpenAIChatAdapter(ChatCompletionsAdapter):
    provider = Provider.OPENAI


class OpenAIResponsesAdapter(ResponsesAdapter):
    provider = Provider.OPENAI
