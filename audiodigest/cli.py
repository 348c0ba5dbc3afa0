"""Command line host: run the pipeline on a local media file, edit settings."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from audiodigest.config import Settings, SettingsStore
from audiodigest.exceptions import ConfigurationError, StageExecutionError
from audiodigest.pipeline.orchestrator import PipelineOrchestrator
from audiodigest.utils.logging_setup import setup_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="audiodigest", description="Transcribe and summarize local media files."
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to the persisted settings JSON (default: SETTINGS_FILE or ./audiodigest.json)",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Transcribe and summarize a media file")
    run.add_argument("media", help="Path to a local audio/video file")
    run.add_argument("--base-dir", default=None, help="Resolve relative media paths against this dir")
    run.add_argument("--quiet", action="store_true", help="Only print the summary path")

    config = sub.add_parser("config", help="Show or change persisted settings")
    config_sub = config.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Print the settings record (API key masked)")
    set_cmd = config_sub.add_parser("set", help="Set one key and persist the full record")
    set_cmd.add_argument("key", help="Setting name, camelCase or snake_case (e.g. aiModel)")
    set_cmd.add_argument("value", help="New value; lists are comma separated")
    return parser.parse_args(argv)


def _masked(record: dict[str, Any]) -> dict[str, Any]:
    out = dict(record)
    key = str(out.get("aiApiKey") or "")
    if key:
        out["aiApiKey"] = key[:3] + "…" + key[-4:] if len(key) > 8 else "***"
    return out


async def _run(args: argparse.Namespace, store: SettingsStore) -> int:
    pipeline_settings = store.load()
    if args.base_dir:
        pipeline_settings = pipeline_settings.with_changes(base_dir=args.base_dir)

    orchestrator = PipelineOrchestrator(pipeline_settings)
    try:
        result = await orchestrator.run(args.media)
    except StageExecutionError as exc:
        print(f"failed at {exc.stage} [{exc.error_code}]: {exc.message}", file=sys.stderr)
        return 1

    print(result.summary_path)
    if not args.quiet:
        print()
        print(result.summary_text)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = Settings()
    if args.settings:
        settings = Settings(settings_file=args.settings)
    setup_logging(settings, level=args.log_level)
    store = settings.settings_store()

    try:
        if args.command == "run":
            return asyncio.run(_run(args, store))
        if args.config_command == "show":
            print(json.dumps(_masked(store.load().to_record()), ensure_ascii=False, indent=2))
            return 0
        store.load()
        store.update(**{args.key: args.value})
        print(f"{args.key} saved to {store.path}")
        return 0
    except ConfigurationError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
