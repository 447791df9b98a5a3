from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Optional, Sequence

from .analyze.charts import parse_chart_description
from .analyze.provider_factory import ProviderFactory
from .analyze.truncation import truncate_rows
from .config import InsightsConfig
from .constants import ExitCode
from .errors import InsightsError
from .logging import InsightsLogger
from .models import PROVIDER_TYPES, TEMPLATE_KINDS, AnalysisResult


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="datasight", description="Generate insights for CSV data with an LLM")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a local CSV file")
    analyze.add_argument("file", type=Path, help="Path to the CSV file")
    analyze.add_argument("--prompt", default=None, help="Analysis request (defaults per template)")
    analyze.add_argument("--provider", default=None, help="Provider: " + ", ".join(PROVIDER_TYPES))
    analyze.add_argument("--template", default="text-summary", choices=TEMPLATE_KINDS)
    analyze.add_argument("--json", action="store_true", help="Emit the result as JSON")

    providers = sub.add_parser("providers", help="Show configured and recommended providers")
    providers.add_argument("--size", type=int, default=None, help="Payload size in bytes for a recommendation")
    providers.add_argument("--json", action="store_true", help="Emit as JSON")
    return parser


def _result_payload(result: AnalysisResult) -> dict:
    return {
        "provider": result.provider,
        "model": result.model,
        "tokensUsed": result.tokens_used,
        "cost": result.cost,
        "insights": result.insights,
    }


async def _run_analyze(args: argparse.Namespace, config: InsightsConfig, logger: InsightsLogger) -> int:
    csv_data = args.file.read_text(encoding="utf-8", errors="replace")
    factory = ProviderFactory(config, logger=logger)
    provider = factory.create_provider(args.provider)
    result = await provider.analyze(
        truncate_rows(csv_data, config.max_rows),
        args.prompt,
        args.file.name,
        args.template,
    )

    if args.json:
        print(json.dumps(_result_payload(result), indent=2))
        return ExitCode.SUCCESS

    if args.template == "bar-chart":
        parsed = parse_chart_description(result.insights)
        if not parsed.ok:
            print(f"Chart generation error: {parsed.error}", file=sys.stderr)
            print(parsed.raw)
            return ExitCode.ERROR
        print(parsed.chart.model_dump_json(indent=2))
    else:
        print(result.insights)
    print(
        f"\n-- {result.provider} / {result.model}: {result.tokens_used} tokens, ${result.cost:.6f}",
        file=sys.stderr,
    )
    return ExitCode.SUCCESS


def _run_providers(args: argparse.Namespace, config: InsightsConfig) -> int:
    factory = ProviderFactory(config)
    payload = {
        "available": factory.list_available_providers(),
        "default": factory.resolve_type(),
        "recommended": factory.recommend_provider(args.size) if args.size is not None else None,
    }
    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        print(f"default:     {payload['default']}")
        print(f"available:   {', '.join(payload['available']) or '(none configured)'}")
        if payload["recommended"]:
            print(f"recommended: {payload['recommended']}")
    return ExitCode.SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = _build_parser().parse_args(argv)
    logger = InsightsLogger(run_id=str(uuid.uuid4()))

    try:
        config = InsightsConfig()
        if args.command == "providers":
            return int(_run_providers(args, config))
        return int(asyncio.run(_run_analyze(args, config, logger)))
    except InsightsError as exc:
        logger.error("datasight failed", error=str(exc), code=exc.code)
        print(f"error: {exc}", file=sys.stderr)
        return int(exc.exit_code)
    except (OSError, ValueError) as exc:
        logger.error("datasight failed", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return int(ExitCode.ERROR)


if __name__ == "__main__":
    sys.exit(main())
