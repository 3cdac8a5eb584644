"""Serve the suggestion engine over HTTP."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from suggestion_engine.adapters.json_store import JsonStateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.engine import SuggestionEngine
from suggestion_engine.service import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the suggestion-engine HTTP service")
    parser.add_argument("--state", default="data/user_state.json", help="Path to the JSON state file")
    parser.add_argument("--epoch", default=None, help="ISO-8601 start of the modeled month")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the uniform-field fallback draw")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = EngineConfig(seed=args.seed)
    if args.epoch:
        config = EngineConfig(epoch=datetime.fromisoformat(args.epoch), seed=args.seed)

    engine = SuggestionEngine(JsonStateStore(args.state, config), config)
    uvicorn.run(create_app(engine), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
