"""CLI entry point for the stock prediction dashboard backend.

Commands:
  - migrate: Apply database migrations
  - serve: Run the API under uvicorn
  - predict: Query the external predictor and print the results
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from stockdash.config import load_config
from stockdash.models.prediction import PredictorResult, signal_for_confidence
from stockdash.registry.db import Database


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending database migrations."""
    config = load_config()
    with Database(config.db_dsn, pooled=False) as db:
        applied = db.run_migrations()
    if applied:
        print(f"Applied: {', '.join(applied)}")
    print("Migrations complete.")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the API server."""
    import uvicorn

    from stockdash.api.app import create_app

    uvicorn.run(create_app(use_lifespan=True), host=args.host, port=args.port, log_config=None)


def cmd_predict(args: argparse.Namespace) -> int:
    """Call the predictor for the given symbols and print JSON.

    Results whose signal does not follow the confidence policy are flagged;
    the exit status is 1 when any symbol failed or was flagged.
    """
    from stockdash.predictor.http import HttpPredictorClient

    config = load_config()
    client = HttpPredictorClient.from_config(config)

    async def _run():
        try:
            return await client.predict_batch(args.symbols)
        finally:
            await client.close()

    results = asyncio.run(_run())
    problems = 0
    out = []
    for r in results:
        item = r.to_dict()
        if isinstance(r, PredictorResult):
            if not r.is_consistent:
                item["expectedSignal"] = signal_for_confidence(r.confidence).value
                problems += 1
        else:
            problems += 1
        out.append(item)

    print(json.dumps(out, indent=2))
    return 1 if problems else 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="stockdash",
        description="Stock prediction dashboard backend",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subs = parser.add_subparsers(dest="command", required=True)

    # migrate
    subs.add_parser("migrate", help="Apply database migrations")

    # serve
    p_serve = subs.add_parser("serve", help="Run the API server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind address")
    p_serve.add_argument("--port", type=int, default=8080, help="Bind port")

    # predict
    p_predict = subs.add_parser("predict", help="Query the external predictor")
    p_predict.add_argument("symbols", nargs="+", help="Ticker symbols")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    commands = {
        "migrate": cmd_migrate,
        "serve": cmd_serve,
        "predict": cmd_predict,
    }
    status = commands[args.command](args)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
