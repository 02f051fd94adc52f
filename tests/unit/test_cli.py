"""Unit tests for the llm-gateway-route CLI."""
import json
from unittest.mock import patch

from llm_gateway.cli import route_prompt
from llm_gateway.errors import UpstreamError
from llm_gateway.schemas import Provider
from llm_gateway.settings import Settings


def run(argv, adapters):
    with patch.object(route_prompt, "get_settings", return_value=Settings(_env_file=None)), \
            patch.object(route_prompt, "build_llm_adapters", return_value={a.provider: a for a in adapters}):
        return route_prompt.main(argv)


class TestRoutePromptCLI:

    def test_prints_result(self, make_adapter, capsys):
        adapters = [make_adapter(Provider.DEEPSEEK, "answer"), make_adapter(Provider.OPENAI)]
        code = run(["hello", "--trace-id", "cli-1"], adapters)

        assert code == 0
        body = json.loads(capsys.readouterr().out)
        assert body["output_text"] == "answer"
        assert body["trace_id"] == "cli-1"

    def test_forced_failure_exits_non_zero(self, make_adapter, capsys):
        adapters = [make_adapter(Provider.DEEPSEEK), make_adapter(Provider.OPENAI, UpstreamError("down"))]
        code = run(["hello", "--provider", "openai"], adapters)

        assert code == 1
        body = json.loads(capsys.readouterr().out)
        assert body["errors"] == ["OpenAI is currently unavailable; please try again later"]
