"""
Resolve one wallet request from the command line.

    python -m wallet_intents "send 5 USD to Alice" --model gemini-2.0-flash
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from wallet_intents.core import settings, setup_logging
from wallet_intents.llm.intent_agent import IntentGraphAgent
from wallet_intents.llm.outcomes import OracleFailure

EXIT_ORACLE_FAILURE = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wallet_intents", description=__doc__.strip().splitlines()[0])
    parser.add_argument("utterance", help="Natural-language wallet request")
    parser.add_argument("--model", default=None, help=f"Chat model (default: {settings.GEMINI_MODEL})")
    parser.add_argument("--log-level", default=None, help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser.parse_args(argv)


async def run(utterance: str, model: Optional[str] = None, agent: Optional[IntentGraphAgent] = None) -> int:
    agent = agent or IntentGraphAgent()
    outcome = await agent.resolve(utterance, model=model)
    print(json.dumps(outcome.to_record(), indent=2))
    return EXIT_ORACLE_FAILURE if isinstance(outcome, OracleFailure) else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    # stdout carries the JSON record
    setup_logging(args.log_level, stream=sys.stderr)
    return asyncio.run(run(args.utterance, model=args.model))


if __name__ == "__main__":
    sys.exit(main())
