from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and merging
of configuration sources (defaults, persistent storage, and CLI overrides),
export/import execution, and result rendering.
"""

import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from gallerysnap.core.analysis.stats import ProgressTracker, format_bytes
from gallerysnap.core.snapshot.engine import run_export, run_import
from gallerysnap.core.store import TreeStore
from gallerysnap.core.validator import validate_config
from gallerysnap.domain.config import get_default_app_state, load_app_state, save_config
from gallerysnap.domain.snapshot_models import SnapshotResult
from gallerysnap.infra.fs import normalize_path
from gallerysnap.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
)
from gallerysnap.interface.cli import args as cli_args
from gallerysnap.utils.i18n import DEFAULT_LOCALE, i18n

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 usage error,
             130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Persistent state (app settings + last session) unless defaults are forced
    app_state = get_default_app_state() if args.use_defaults else load_app_state()
    settings = app_state["app_settings"]

    # 3. Logging bootstrap (console on stderr, optional persistent file)
    log_level = "DEBUG" if args.debug else str(settings.get("log_level") or "INFO")
    log_file = get_default_log_path() if args.log_file else None
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file))

    _apply_locale(settings.get("locale"))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 4. Map, merge and validate over the last session
    raw_conf = _merge_config(app_state["last_session"], cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    if args.command is None:
        parser.print_help()
        return 2

    # 5. Execution phase
    try:
        if args.command == "export":
            input_path = normalize_path(clean_conf.get("input_path"), os.getcwd())
            if not os.path.exists(input_path):
                msg = i18n.t("errors.path_not_exist", path=input_path)
                logger.error(msg)
                print(f"ERROR: {msg}", file=sys.stderr)
                return 2

            clean_conf["input_path"] = input_path
            print(i18n.t("cli.status.exporting"), file=sys.stderr)
            result = run_export(
                clean_conf,
                overwrite=bool(args.overwrite),
                on_progress=_print_progress,
            )
            if result.ok:
                save_config(clean_conf)
        else:
            store = TreeStore()
            try:
                result = run_import(args.snapshot_path, store)
            finally:
                store.reset()

    except KeyboardInterrupt:
        msg = i18n.t("cli.status.interrupted")
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130
    except Exception as e:
        msg = i18n.t("errors.unexpected", error=str(e))
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    # 6. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into the base configuration.

    Only known keys with a value are merged.
    """
    out = dict(base)
    keys_to_merge = [
        "input_path", "output_path", "short_edge_target", "jpeg_quality",
        "include_hidden", "max_snapshot_mb", "pretty_json",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


def _apply_locale(locale: Optional[str]) -> None:
    """Switch the message catalog, keeping the default one when unavailable."""
    if not locale or locale == i18n.locale:
        return
    i18n.load_locale(locale)
    if not i18n.is_loaded:
        logger.warning(f"Locale '{locale}' unavailable. Using '{DEFAULT_LOCALE}'.")
        i18n.load_locale(DEFAULT_LOCALE)

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_progress(done: int, total: int) -> None:
    percent = ProgressTracker(total, done).percent
    print(i18n.t("cli.status.progress", done=done, total=total, percent=percent), file=sys.stderr)


def _print_human_summary(result: SnapshotResult) -> None:
    """
    Format and print the execution result to the standard output.

    Args:
        result: The export or import result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    if result.operation == "export":
        print(i18n.t("cli.status.export_done", path=result.snapshot_path))
    else:
        print(i18n.t("cli.status.import_done", path=result.snapshot_path))

    print()
    for line in result.tree_lines:
        print(line)
    print()

    print(i18n.t("cli.summary.files", count=result.files_total))
    print(i18n.t("cli.summary.encoded", count=result.files_encoded))
    print(i18n.t("cli.summary.folders", count=result.stats.total_folders))
    print(i18n.t("cli.summary.size", size=format_bytes(result.stats.total_size)))
    if result.bytes_written:
        print(i18n.t("cli.summary.written", size=format_bytes(result.bytes_written)))

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
