"""
hashtree CLI

Command-line interface for building hash trees and checking inclusion proofs.

Usage:
    python -m hashtree_cli build Debo Kenneth Manji Jerry victor
    python -m hashtree_cli prove --index 0 --file items.json --out proof.json
    python -m hashtree_cli verify proof.json
    python -m hashtree_cli demo
"""

__version__ = "0.1.0"
