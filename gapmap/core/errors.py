"""
Gap analysis errors.

Resolution failures (unknown ids, no resolvable current level) are fatal to a
single call and surface to the caller. Search failures never raise: they
degrade to a fallback path instead.
"""

from __future__ import annotations


class GapAnalysisError(Exception):
    """Base class for engine errors."""

    status_code = 500


class NodeNotFoundError(GapAnalysisError):
    """Raised when a target or endpoint id is absent from the index."""

    status_code = 404

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class NoCurrentLevelError(GapAnalysisError):
    """Raised when the learner's current node cannot be resolved."""

    status_code = 404

    def __init__(self, message: str = "Could not determine current level"):
        super().__init__(message)


class SnapshotError(GapAnalysisError):
    """Raised when a snapshot file cannot be read or validated."""

    status_code = 400
