"""Argument parser construction for CLI commands."""

from __future__ import annotations

import argparse
from typing import List, Optional

from .classifier import ArbitrationPolicy
from .config import WAIT_UNTIL_CHOICES

_POLICY_CHOICES = [policy.value for policy in ArbitrationPolicy]


def _add_render_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("Page rendering")
    group.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Page load timeout in milliseconds (default: 30000)",
    )
    group.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to let the page settle after load (default: 1.4)",
    )
    group.add_argument(
        "--wait-until",
        type=str,
        default=None,
        choices=list(WAIT_UNTIL_CHOICES),
        help="Page load event to wait for (default: networkidle)",
    )
    group.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--policy",
        type=str,
        choices=_POLICY_CHOICES,
        default=None,
        help="Which signal wins when date and color disagree "
             "(default: CTT_STATUS_POLICY or date-first)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON (includes code, URL, signal and progress flags)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def build_status_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctt-status",
        description="Print the current status of a CTT shipment.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Prints one of: Entregue, Em trânsito, Em espera, unknown

Examples:
  # Bare tracking code
  ctt-status RT160347308PT

  # Full tracking URL
  ctt-status "https://appserver.ctt.pt/CustomerArea/PublicArea_Detail?ObjectCodeInput=RT160347308PT&SearchInput=RT160347308PT&IsFromPublicArea=true"

  # JSON with progress flags
  ctt-status RT160347308PT --json

  # Save the captured page, then classify it again offline
  ctt-status RT160347308PT --dump-snapshot page.json
  ctt-status --from-snapshot page.json
""",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Tracking code or full tracking URL",
    )
    parser.add_argument(
        "--from-snapshot",
        type=str,
        default=None,
        metavar="FILE",
        help="Classify a saved snapshot JSON instead of rendering the page",
    )
    parser.add_argument(
        "--dump-snapshot",
        type=str,
        default=None,
        metavar="FILE",
        help="Write the captured snapshot JSON to FILE",
    )
    _add_common_args(parser)
    _add_render_args(parser)
    return parser


def parse_status_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_status_parser()
    args = parser.parse_args(argv)
    if not args.target and not args.from_snapshot:
        parser.error("a tracking code or URL is required (or --from-snapshot)")
    return args


def parse_batch_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ctt-status-batch",
        description="Print the current status of several CTT shipments.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # One "CODE<TAB>status" line per shipment
  ctt-status-batch RT160347308PT RT160329508PT RT160279126PT

  # Codes from a file, one per line
  ctt-status-batch --input codes.txt

  # JSON array to a file
  ctt-status-batch RT160347308PT RT160329508PT --json -o statuses.json
""",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        help="Tracking codes or full tracking URLs",
    )
    parser.add_argument(
        "-i",
        "--input",
        type=str,
        default=None,
        metavar="FILE",
        help="Read tracking codes or URLs from FILE, one per line",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=0.2,
        help="Seconds to wait between pages (default: 0.2)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )
    _add_common_args(parser)
    _add_render_args(parser)

    args = parser.parse_args(argv)
    if not args.targets and not args.input:
        parser.error("at least one tracking code or URL is required (or --input)")
    return args
