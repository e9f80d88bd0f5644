"""
Estimate a project from a JSON file.

Usage:
  costengine project.json
  costengine project.json --out estimate.json --verbose

Settings (rate tables path, comparable store backend, OPENAI_API_KEY ...)
come from the environment; see costengine.config.settings.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from costengine.config.errors import CostEngineError
from costengine.config.settings import settings
from costengine.services.estimate_assembler import (
    EstimateAssembler,
    PipelineContext,
    parse_project,
)
from costengine.utils.log_config import configure_logging


def _init_firebase() -> None:
    import firebase_admin

    if not firebase_admin._apps:
        firebase_admin.initialize_app()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a construction cost estimate")
    parser.add_argument("project", help="Path to a project JSON document")
    parser.add_argument("--out", required=False, help="Write the estimate here instead of stdout")
    parser.add_argument("--verbose", action="store_true", help="Print pipeline banners")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level (default from LOG_LEVEL)")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        with open(args.project, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read project: {e}", file=sys.stderr)
        return 2

    try:
        project = parse_project(payload)
        if settings.comparable_store_backend == "firestore":
            _init_firebase()
        context = PipelineContext.from_settings(settings, verbose=args.verbose)
        estimate = asyncio.run(EstimateAssembler(context).generate_estimate(project))
    except CostEngineError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    output = json.dumps(estimate.to_dict(), indent=2)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Wrote {args.out}")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
