"""Coauthor graph traversal."""

from paper_graph.graph.path_finder import DEFAULT_HOP_CUTOFF, PathFinder

__all__ = ["DEFAULT_HOP_CUTOFF", "PathFinder"]
