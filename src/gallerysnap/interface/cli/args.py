from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema (the 'export' and 'import'
commands plus global diagnostics flags) and translates raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict

from gallerysnap.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the GallerySnap CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="gallerysnap",
        description=i18n.t("app.description"),
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help=i18n.t("cli.args.defaults"),
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help=i18n.t("cli.args.dump"),
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        action="store_true",
        help=i18n.t("cli.args.log_file"),
    )

    sub = p.add_subparsers(dest="command")

    # --- Export ---
    exp = sub.add_parser("export", help=i18n.t("cli.commands.export"))
    exp.add_argument(
        "-i", "--input",
        dest="input_path",
        default=None,
        help=i18n.t("cli.args.input"),
    )
    exp.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        help=i18n.t("cli.args.output"),
    )
    exp.add_argument(
        "--short-edge",
        dest="short_edge_target",
        type=int,
        default=None,
        help=i18n.t("cli.args.short_edge"),
    )
    exp.add_argument(
        "--quality",
        dest="jpeg_quality",
        type=int,
        default=None,
        help=i18n.t("cli.args.quality"),
    )
    exp.add_argument(
        "--include-hidden",
        action="store_true",
        help=i18n.t("cli.args.include_hidden"),
    )
    exp.add_argument(
        "--max-mb",
        dest="max_snapshot_mb",
        type=int,
        default=None,
        help=i18n.t("cli.args.max_mb"),
    )
    exp.add_argument(
        "--pretty",
        action="store_true",
        help=i18n.t("cli.args.pretty"),
    )
    exp.add_argument(
        "--overwrite",
        action="store_true",
        help=i18n.t("cli.args.overwrite"),
    )
    _add_json_flag(exp)

    # --- Import ---
    imp = sub.add_parser("import", help=i18n.t("cli.commands.import"))
    imp.add_argument(
        "snapshot_path",
        help=i18n.t("cli.args.snapshot"),
    )
    _add_json_flag(imp)

    return p


def _add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help=i18n.t("cli.args.json"),
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Only the export command carries configuration; unset options map to None
    and are ignored when merging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}
    if getattr(args, "command", None) != "export":
        return overrides

    overrides["input_path"] = args.input_path
    overrides["output_path"] = args.output_path
    overrides["short_edge_target"] = args.short_edge_target
    overrides["jpeg_quality"] = args.jpeg_quality
    overrides["max_snapshot_mb"] = args.max_snapshot_mb

    if args.include_hidden:
        overrides["include_hidden"] = True
    if args.pretty:
        overrides["pretty_json"] = True

    return overrides
