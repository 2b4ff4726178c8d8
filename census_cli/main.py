"""
Census CLI - Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m census_cli verify-tree [--show-tree] [--check-accounts [N]] [--json]
    python -m census_cli proof <address> [--weight W] [--root HEX] [--json]
    python -m census_cli leaf pack <address> <weight>
    python -m census_cli leaf unpack <leaf>
    python -m census_cli config --init

Environment Variables:
    CENSUS_SUBGRAPH_URL         Subgraph GraphQL endpoint
    CENSUS_RPC_URL              Chain JSON-RPC endpoint
    CENSUS_CONTRACT_ADDRESS     Census contract address
    CENSUS_PAGE_SIZE            Events per page (default: 1000)
    CENSUS_HTTP_TIMEOUT         Request timeout in seconds (default: 30)
    CENSUS_SKIP_NOOP_EVENTS     Skip 0 -> 0 events (default: false)
    CENSUS_HTTP_PROXY           HTTP proxy URL
    CENSUS_LOG_LEVEL            Log level (default: WARNING)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

import yaml

from census_cli import __version__
from census_cli.commands import leaf, proof, verify_tree
from census_cli.config import get_default_config_template, load_config
from core.schemas.errors import CensusException


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


# Chatty at INFO; only surfaced when the CLI itself runs at DEBUG
_LIBRARY_LOGGERS = ("urllib3", "web3")


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Send census logs to stderr (and ``log_file``) at ``level``."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )
    if log_level > logging.DEBUG:
        for name in _LIBRARY_LOGGERS:
            logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="census",
        description="Census tree tool - Rebuild the delegation census tree, validate it, and generate proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: ./census.yaml or ~/.config/census/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--subgraph", "-s",
        type=str,
        default=None,
        help="Subgraph GraphQL endpoint URL",
    )
    parser.add_argument(
        "--rpc", "-r",
        type=str,
        default=None,
        help="Ethereum JSON-RPC endpoint URL",
    )
    parser.add_argument(
        "--contract", "-c",
        type=str,
        default=None,
        help="Census contract address",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks for unexpected errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- verify-tree command ---
    verify_parser = subparsers.add_parser(
        "verify-tree",
        help="Rebuild the tree and compare its root with the contract",
        description="Reconstruct the census tree from the subgraph and validate it against the on-chain root.",
    )
    verify_parser.add_argument(
        "--show-tree", "-t",
        action="store_true",
        default=False,
        help="Show every tree slot",
    )
    verify_parser.add_argument(
        "--check-accounts",
        type=int,
        nargs="?",
        const=0,
        default=None,
        metavar="N",
        help="Cross-check slots against getAccountAt/weightOf (first N slots, all when N is omitted)",
    )
    verify_parser.add_argument(
        "--events",
        type=str,
        default=None,
        help="Replay events from a JSON file instead of the subgraph",
    )
    _add_output_flags(verify_parser)
    verify_parser.set_defaults(func=verify_tree.verify_tree_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the inclusion proof for an account",
        description="Reconstruct the tree, validate the root, and print the account's Merkle proof.",
    )
    proof_parser.add_argument(
        "address",
        type=str,
        help="Account address",
    )
    proof_parser.add_argument(
        "--weight", "-w",
        type=int,
        default=None,
        help="Expected current weight (looked up in the tree when omitted)",
    )
    proof_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Expected root (decimal or 0x hex) instead of querying the contract",
    )
    proof_parser.add_argument(
        "--events",
        type=str,
        default=None,
        help="Replay events from a JSON file instead of the subgraph",
    )
    _add_output_flags(proof_parser)
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- leaf command ---
    leaf_parser = subparsers.add_parser(
        "leaf",
        help="Pack or unpack leaf values",
        description="Convert between (address, weight) and packed leaf values.",
    )
    leaf_subparsers = leaf_parser.add_subparsers(dest="leaf_command", help="Leaf operations")

    pack_parser = leaf_subparsers.add_parser("pack", help="Pack an address and weight")
    pack_parser.add_argument("address", type=str, help="Account address")
    pack_parser.add_argument("weight", type=int, help="Weight (uint88)")
    _add_output_flags(pack_parser)
    pack_parser.set_defaults(func=leaf.pack_cmd)

    unpack_parser = leaf_subparsers.add_parser("unpack", help="Unpack a leaf value")
    unpack_parser.add_argument("leaf", type=str, help="Leaf (decimal or 0x hex)")
    _add_output_flags(unpack_parser)
    unpack_parser.set_defaults(func=leaf.unpack_cmd)

    leaf_parser.set_defaults(func=lambda args: leaf_parser.print_help() or EXIT_SUCCESS)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show the resolved configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="census.yaml",
        help="Path for config file (default: census.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Write a template (--init) or print the effective settings."""
    if not args.init:
        # --show is the default action
        print(yaml.safe_dump(args.runtime_config.to_dict(), sort_keys=False), end="")
        return EXIT_SUCCESS

    target = Path(args.path)
    if target.exists():
        print(f"Error: {target} exists; remove it or pass --path", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    target.write_text(get_default_config_template())
    print(f"Wrote {target}")
    print("Settings can also come from CENSUS_* variables or a .env file.")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(
            args.config,
            subgraph_url=args.subgraph,
            rpc_url=args.rpc,
            contract_address=args.contract,
        )
    except (CensusException, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=args.log_file)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except CensusException as e:
        if getattr(args, "json", False):
            print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
