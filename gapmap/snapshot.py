"""
Snapshot loading.

Reads a JSON document describing the nodes and the learner's mastery map:

    {
      "nodes": [
        {"id": "basic_vocabulary", "type": "vocabulary", "difficulty": 1,
         "layer": "L1", "prerequisites": [], "timeEstimate": 30},
        ...
      ],
      "mastery": {"basic_vocabulary": 0.9}
    }

Records are validated with Pydantic before being turned into LearningNode
objects. The layer is derived from the difficulty band only when a record
omits it.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gapmap.core.errors import SnapshotError
from gapmap.core.models import (
    DEFAULT_TIME_ESTIMATE,
    Layer,
    LearningNode,
    NodeKind,
)

NODE_ID_PATTERN = r"^[a-zA-Z0-9_-]+$"

NodeId = Annotated[str, Field(pattern=NODE_ID_PATTERN)]
MasteryValue = Annotated[float, Field(ge=0, le=1)]


class NodeRecord(BaseModel):
    """One node as it appears in a snapshot file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: NodeId
    kind: NodeKind = Field(..., alias="type")
    difficulty: int = Field(..., ge=1, le=10)
    layer: Optional[Layer] = None
    prerequisites: list[str] = Field(default_factory=list)
    time_estimate: Optional[int] = Field(None, alias="timeEstimate", ge=0)
    term: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None

    def to_node(self) -> LearningNode:
        return LearningNode(
            id=self.id,
            kind=self.kind,
            difficulty=self.difficulty,
            layer=self.layer or Layer.from_difficulty(self.difficulty),
            prerequisites=tuple(self.prerequisites),
            time_estimate=self.time_estimate if self.time_estimate is not None else DEFAULT_TIME_ESTIMATE,
            title=self.term or self.name or self.title or "",
        )


class Snapshot(BaseModel):
    """Nodes plus the learner's mastery map."""

    nodes: list[NodeRecord] = Field(default_factory=list)
    mastery: dict[NodeId, MasteryValue] = Field(default_factory=dict)

    def learning_nodes(self) -> list[LearningNode]:
        return [record.to_node() for record in self.nodes]


def parse_snapshot(data: dict) -> Snapshot:
    """
    Validate an already-decoded snapshot document.

    Raises:
        SnapshotError: If the document does not match the snapshot schema
    """
    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot: {e.error_count()} validation error(s)\n{e}") from e


def load_snapshot(path: str | Path) -> Snapshot:
    """
    Load and validate a snapshot file.

    Args:
        path: Path to a JSON snapshot

    Returns:
        Validated Snapshot

    Raises:
        SnapshotError: If the file is missing, not JSON, or invalid
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot file is not valid JSON: {path} ({e})") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot root must be an object: {path}")

    snapshot = parse_snapshot(data)
    logger.debug(
        f"Loaded snapshot {path}: {len(snapshot.nodes)} nodes, "
        f"{len(snapshot.mastery)} mastery entries"
    )
    return snapshot
