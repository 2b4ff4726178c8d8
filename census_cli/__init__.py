"""
Census CLI

Command-line interface for census tree reconstruction.

Usage:
    python -m census_cli verify-tree --subgraph URL --rpc URL --contract ADDR
    python -m census_cli proof 0xabc... --json
    python -m census_cli leaf pack 0xabc... 3
    python -m census_cli config --init
"""

__version__ = "0.1.0"
