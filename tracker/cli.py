"""Command-line interface for CTT shipment status checks."""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from . import check_statuses_async, classify_snapshot
from .capture import CaptureError, capture_snapshot_async
from .cli_config import load_config
from .cli_output import (
    read_snapshot_file,
    read_targets_file,
    write_check,
    write_checks,
    write_snapshot,
)
from .cli_parsers import parse_batch_args, parse_status_args
from .config import CaptureOptions, load_options_from_env
from .document import TrackingCheck
from .snapshot import snapshot_from_dict
from .urls import build_tracking_url


def _load_config() -> None:
    env_file = load_config(cwd=Path.cwd(), load_env=load_dotenv, copy_file=shutil.copy)
    if env_file is not None:
        logging.debug("Loaded configuration from %s", env_file)


def _setup_logging(verbose: bool) -> None:
    # stdout is reserved for the status token
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _options_from_args(args: argparse.Namespace) -> CaptureOptions:
    options = load_options_from_env()
    if getattr(args, "timeout", None) is not None:
        options = replace(options, page_timeout_ms=args.timeout)
    if getattr(args, "delay", None) is not None:
        options = replace(options, settle_delay=max(0.0, args.delay))
    if getattr(args, "wait_until", None):
        options = replace(options, wait_until=args.wait_until)
    if getattr(args, "headed", False):
        options = replace(options, headless=False)
    return replace(options, verbose=bool(getattr(args, "verbose", False)))


# =============================================================================
# STATUS COMMAND
# =============================================================================


async def _run_status_async(args: argparse.Namespace) -> TrackingCheck:
    """Main async entry point for a single status check."""
    if args.from_snapshot:
        snapshot = snapshot_from_dict(read_snapshot_file(args.from_snapshot))
        result = classify_snapshot(snapshot, policy=args.policy)
        return TrackingCheck.from_result(
            args.target or snapshot.url, snapshot.url, result
        )

    url = build_tracking_url(args.target)
    logging.info("Checking: %s", url)
    try:
        snapshot = await capture_snapshot_async(url, options=_options_from_args(args))
    except CaptureError as exc:
        logging.warning("Capture failed: %s", exc)
        return TrackingCheck.failed(args.target, url, str(exc))

    if args.dump_snapshot:
        write_snapshot(snapshot, args.dump_snapshot)

    result = classify_snapshot(snapshot, policy=args.policy)
    return TrackingCheck.from_result(args.target, url, result)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for ctt-status.

    Always prints a token and returns 0; failures print ``unknown``.
    """
    args = parse_status_args(argv)
    _setup_logging(args.verbose)

    target = args.target or args.from_snapshot
    try:
        _load_config()
        check = asyncio.run(_run_status_async(args))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        check = TrackingCheck.failed(target, "", "interrupted")
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        check = TrackingCheck.failed(target, "", str(exc))

    write_check(check, args.json_output)
    return 0


# =============================================================================
# BATCH COMMAND
# =============================================================================


async def _run_batch_async(
    args: argparse.Namespace, targets: List[str]
) -> List[TrackingCheck]:
    """Main async entry point for batch checks."""
    logging.info("Checking %d shipment(s)...", len(targets))
    return await check_statuses_async(
        targets,
        options=_options_from_args(args),
        policy=args.policy,
        delay=max(0.0, args.interval),
    )


def batch_main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for ctt-status-batch.

    Always writes one result per target and returns 0; targets that could
    not be checked come out as ``unknown``.
    """
    args = parse_batch_args(argv)
    _setup_logging(args.verbose)

    targets = list(args.targets)
    try:
        _load_config()
        if args.input:
            targets.extend(read_targets_file(args.input))
        checks = asyncio.run(_run_batch_async(args, targets))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        checks = [TrackingCheck.failed(target, "", "interrupted") for target in targets]
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        checks = [TrackingCheck.failed(target, "", str(exc)) for target in targets]

    failed = [check for check in checks if check.status == "failed"]
    for check in failed:
        logging.warning("Failed: %s - %s", check.target, check.error_message)

    write_checks(checks, args.output, args.json_output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
