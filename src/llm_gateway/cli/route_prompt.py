"""
CLI for sending one prompt through the LLM router.
"""

import argparse
import json
import logging
import sys
import uuid

from llm_gateway.adapters.registry import build_llm_adapters
from llm_gateway.logging_setup import setup_logging
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.schemas import RouterError
from llm_gateway.settings import get_settings

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Route a prompt to the configured LLM providers and print the JSON result."
    )

    cfg = get_settings()

    parser.add_argument("input", help="Prompt text sent as the user message.")
    parser.add_argument(
        "--provider",
        default=None,
        help="Force one provider (no fallback). Default: automatic in configured order."
    )
    parser.add_argument("--system", default=None, help="Optional system instruction.")
    parser.add_argument(
        "--trace-id",
        default=None,
        help="Trace id forwarded to providers. Default: random UUID."
    )

    args = parser.parse_args(argv)
    setup_logging(cfg.log_level)

    trace_id = args.trace_id or str(uuid.uuid4())
    router = ProviderRouter(build_llm_adapters(cfg), cfg.llm_provider_order)
    payload = {"input": args.input, "provider": args.provider, "system": args.system}

    outcome = router.route(payload, trace_id)
    if isinstance(outcome, RouterError):
        logger.error(f"Routing failed with status {outcome.status_code}")
        print(json.dumps(outcome.to_body(), indent=2, ensure_ascii=False))
        return 1

    print(json.dumps(outcome.to_body(trace_id), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
