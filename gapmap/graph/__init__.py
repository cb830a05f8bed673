"""
Graph Module.

Prerequisite graph index used by the scorer and the path finder.
"""
from gapmap.graph.index import GraphIndex, build_index

__all__ = ["GraphIndex", "build_index"]
