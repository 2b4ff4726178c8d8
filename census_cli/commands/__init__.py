"""
CLI command modules.
"""

from census_cli.commands import leaf, proof, verify_tree

__all__ = ["leaf", "proof", "verify_tree"]
