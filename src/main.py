# src/main.py — v1
"""CLI entry point: action mode, save and restore commands.

Usage:
    s3cache                          # action mode, inputs from INPUT_* env vars
    s3cache save --key K --path P [--path P2 ...]
    s3cache restore --key K --path P [--restore-key R ...]

Only invalid configuration fails the process. Cache outcomes, including
errors while saving or restoring, never change the exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from s3cache.config.settings import ConfigurationError, Settings, load_settings
from s3cache.core.models import CacheOutcome, RunnerContext
from s3cache.keys.builder import KeyBuilder
from s3cache.logging.logger import setup_logging
from s3cache.pipeline.restore import RestoreOrchestrator
from s3cache.pipeline.save import SaveOrchestrator
from s3cache.runner.actions import ActionsRunner
from s3cache.storage.store_factory import create_store
from s3cache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None, runner: ActionsRunner | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    runner = runner or ActionsRunner()

    try:
        settings = load_settings(**_overrides(args))
    except ConfigurationError as exc:
        setup_logging("INFO", "actions")
        return runner.set_failed(str(exc))

    runner.set_secret(settings.cache_username.get_secret_value())
    runner.set_secret(settings.cache_password.get_secret_value())
    setup_logging(
        "DEBUG" if args.verbose else settings.log_level, settings.log_format
    )

    _log_configuration(settings)
    working_dir = args.working_dir or Path.cwd()
    outcome = run_action(
        settings,
        RunnerContext.from_env(),
        working_dir=working_dir,
        temp_root=runner.temp_root(),
    )
    publish_outputs(outcome, runner)
    return 0


def run_action(
    settings: Settings,
    context: RunnerContext,
    working_dir: Path,
    temp_root: Path | None = None,
) -> CacheOutcome:
    """Run the configured save or restore and return its outcome."""
    try:
        store = create_store(settings)
    except Exception as exc:
        logger.warning("Failed to initialize cache store: %s", exc)
        return CacheOutcome(
            action=settings.action,
            status="degraded",
            diagnostics=[f"store unavailable: {exc}"],
        )

    key_builder = KeyBuilder(context)
    if settings.action == "save":
        return SaveOrchestrator(
            store, key_builder, working_dir=working_dir, temp_root=temp_root,
        ).run(settings.key, settings.paths_list)

    return RestoreOrchestrator(
        store,
        key_builder,
        working_dir=working_dir,
        temp_root=temp_root,
        strict_manifest=settings.strict_manifest,
    ).run(settings.key, settings.restore_keys_list)


def publish_outputs(outcome: CacheOutcome, runner: ActionsRunner) -> None:
    """Map an outcome to step outputs (``cache-hit``, ``cache-key``)."""
    if outcome.action == "restore":
        runner.set_output("cache-hit", "true" if outcome.cache_hit else "false")
    if outcome.cache_key:
        runner.set_output("cache-key", outcome.cache_key)


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="s3cache",
        description=f"s3cache v{__version__} - CI cache on S3-compatible storage",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--working-dir", type=Path, default=None,
        help="Directory paths are resolved against (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- save ---
    p_save = subparsers.add_parser("save", help="Archive paths and upload them")
    _add_common_arguments(p_save)

    # --- restore ---
    p_restore = subparsers.add_parser(
        "restore", help="Download the best-matching archive and restore it",
    )
    _add_common_arguments(p_restore)
    p_restore.add_argument(
        "--restore-key", dest="restore_keys", action="append", default=[],
        help="Fallback key template, tried in order (repeatable)",
    )

    return parser


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--key", required=True, help="Cache key template")
    p.add_argument(
        "--path", dest="paths", action="append", required=True,
        help="Path or glob pattern to cache (repeatable)",
    )


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    """Settings overrides from CLI arguments; empty in action mode."""
    if args.command is None:
        return {}
    overrides: dict[str, object] = {
        "action": args.command,
        "key": args.key,
        "path": "\n".join(args.paths),
    }
    if getattr(args, "restore_keys", None):
        overrides["restore_keys"] = "\n".join(args.restore_keys)
    return overrides


def _log_configuration(settings: Settings) -> None:
    logger.info("S3 Cache Action")
    logger.info("Action: %s", settings.action)
    logger.info("S3 Endpoint: %s", settings.s3_endpoint)
    logger.info("S3 Bucket: %s", settings.s3_bucket)
    logger.info("S3 Region: %s", settings.s3_region)
    logger.info("Paths: %s", ", ".join(settings.paths_list))
    logger.info("")


def main_entry() -> None:
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
