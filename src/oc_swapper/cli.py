#!/usr/bin/env python3
"""Headless command line shell for OC Swapper.

Usage:
    oc-swapper [--config PATH] [-v] {status,swap,about,init,hash,record-hashes,history}

Environment variables:
    OC_SWAPPER_CONFIG       Config file (default: ./config.ini)
    OC_SWAPPER_HOME         Log and audit directory (default: ~/.oc_swapper)
    OC_SWAPPER_LOG_LEVEL    Console log level (default: INFO)
"""
import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import get_about_text, __version__
from .config_store import ConfigStore, Configuration
from .errors import ConfigWriteError, SwapperError
from .utils.audit_log import get_recent_swaps, setup_audit_logging
from .utils.logging_config import setup_logging
from .variants import VariantManager, VariantState, file_hash

logger = logging.getLogger(__name__)


def describe_state(state: VariantState) -> str:
    if state.is_variant:
        return f"You are currently using {state.label} binaries"
    if state is VariantState.MISSING:
        return "No openvr_api.dll is installed"
    return "The installed openvr_api.dll matches neither configured hash"


def _load_config(store: ConfigStore) -> Configuration:
    """Load the config, carrying on in memory if first-run defaults can't be saved."""
    try:
        return store.load()
    except ConfigWriteError as e:
        if e.config is None:
            raise
        logger.warning(f"{e}; continuing with defaults")
        return e.config


def _startup(store: ConfigStore) -> VariantManager:
    manager = VariantManager(_load_config(store))
    manager.initialize()
    return manager


def cmd_status(store: ConfigStore, args: argparse.Namespace) -> int:
    manager = _startup(store)
    state = manager.get_current_state()

    if args.json:
        print(json.dumps({
            "state": state.value,
            "target": str(manager.target_path),
            "hash": manager.last_digest,
        }, indent=2))
    else:
        print(describe_state(state))
        if state.is_variant:
            print(f"Swap to {state.other.label} with: oc-swapper swap")
    return 0


def cmd_swap(store: ConfigStore, args: argparse.Namespace) -> int:
    manager = _startup(store)
    result = manager.request_swap()

    if result.warning:
        print(f"WARNING: {result.warning}", file=sys.stderr)
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    print(describe_state(result.state))
    return 0


def cmd_about(store: ConfigStore, args: argparse.Namespace) -> int:
    print(get_about_text())
    return 0


def cmd_init(store: ConfigStore, args: argparse.Namespace) -> int:
    if store.exists:
        print(f"Config already exists: {store.config_path}")
        return 0
    config = store.load()
    print(f"Created {store.config_path}")
    for key in config.missing_keys():
        print(f"  fill in {key}")
    return 0


def cmd_hash(store: ConfigStore, args: argparse.Namespace) -> int:
    for path in args.files:
        print(f"{file_hash(path)}  {path}")
    return 0


def cmd_record_hashes(store: ConfigStore, args: argparse.Namespace) -> int:
    config = store.load()
    updated = dataclasses.replace(
        config,
        steamvr_hash=file_hash(config.steamvr_storage_path),
        opencomposite_hash=file_hash(config.opencomposite_storage_path),
    )
    if updated.steamvr_hash == updated.opencomposite_hash:
        logger.warning("Both storage files are identical; classification will always report SteamVR")

    store.save(updated)
    print(f"SteamFile={updated.steamvr_hash}")
    print(f"OpenCompositeFile={updated.opencomposite_hash}")
    return 0


def cmd_history(store: ConfigStore, args: argparse.Namespace) -> int:
    records = get_recent_swaps(limit=args.limit)
    if not records:
        print("No swaps recorded")
        return 0

    for record in records:
        status = "OK" if record.success else "FAIL"
        drift = " (drift)" if record.drift_detected else ""
        print(f"{record.timestamp}  {record.operation:9s} {record.from_state} -> {record.to_state}  {status}{drift}")
        if record.error:
            print(f"    {record.error}")
    return 0


COMMANDS = {
    "status": cmd_status,
    "swap": cmd_swap,
    "about": cmd_about,
    "init": cmd_init,
    "hash": cmd_hash,
    "record-hashes": cmd_record_hashes,
    "history": cmd_history,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oc-swapper",
        description="Swap openvr_api.dll between the SteamVR and OpenComposite builds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Create config.ini in the current directory
    oc-swapper init

    # Fill in the hashes from the two storage folders
    oc-swapper record-hashes

    # Show and toggle the installed binaries
    oc-swapper status
    oc-swapper swap
""",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: $OC_SWAPPER_CONFIG or ./config.ini)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Show which binaries are installed")
    status.add_argument("--json", action="store_true", help="Machine-readable output")

    sub.add_parser("swap", help="Swap to the other binaries")
    sub.add_parser("about", help="About OC Swapper")
    sub.add_parser("init", help="Create a default config file")

    hash_parser = sub.add_parser("hash", help="Print the hash of one or more files")
    hash_parser.add_argument("files", nargs="+", type=Path)

    sub.add_parser("record-hashes", help="Store the hashes of both storage files in the config")

    history = sub.add_parser("history", help="Show recent swaps")
    history.add_argument("--limit", type=int, default=20)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    try:
        setup_logging(logging.DEBUG if args.verbose else None)
        setup_audit_logging()
    except OSError as e:
        print(f"Error: cannot set up logging: {e}", file=sys.stderr)
        return 1

    store = ConfigStore(args.config)

    try:
        return COMMANDS[args.command](store, args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except SwapperError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
