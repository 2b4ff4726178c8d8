"""
Census CLI - leaf Command

Pack and unpack census leaf values.

Usage:
    census leaf pack <address> <weight>
    census leaf unpack <leaf>
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.census.leaf import pack_leaf, unpack_leaf
from core.schemas.errors import LeafEncodingException


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def pack_cmd(args: Namespace) -> int:
    """Handle ``leaf pack``."""
    try:
        leaf = pack_leaf(args.address, args.weight)
    except LeafEncodingException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps({"leaf": hex(leaf), "leaf_dec": str(leaf)}, indent=2))
    else:
        print(f"leaf: {leaf:#x}")
        print(f"      {leaf}")
    return EXIT_SUCCESS


def unpack_cmd(args: Namespace) -> int:
    """Handle ``leaf unpack``. Accepts decimal or 0x-prefixed hex."""
    try:
        leaf = int(args.leaf, 0)
        address, weight = unpack_leaf(leaf)
    except ValueError:
        print(f"Error: not an integer: {args.leaf}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except LeafEncodingException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps({"address": address, "weight": weight}, indent=2))
    else:
        print(f"address: {address}")
        print(f"weight:  {weight}")
    return EXIT_SUCCESS
