"""
Test fixtures package for hashtree tests.

Usage:
    from fixtures import make_leaves, make_tree

    def test_something():
        tree = make_tree(7)
"""

from .tree_fixtures import (
    SAMPLE_NAMES,
    flip_bit,
    flip_side,
    h,
    make_leaves,
    make_name_tree,
    make_tree,
    reference_root,
)

__all__ = [
    "SAMPLE_NAMES",
    "flip_bit",
    "flip_side",
    "h",
    "make_leaves",
    "make_name_tree",
    "make_tree",
    "reference_root",
]
