"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from gapmap.core.models import Layer, LearningNode, NodeKind  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_node(node_id, difficulty, layer=None, prerequisites=(), kind=NodeKind.VOCABULARY, **kwargs):
    """Build a LearningNode with the layer defaulting to its difficulty band."""
    return LearningNode(
        id=node_id,
        kind=kind,
        difficulty=difficulty,
        layer=layer or Layer.from_difficulty(difficulty),
        prerequisites=tuple(prerequisites),
        **kwargs,
    )


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def abc_nodes():
    """Three-node chain A (L1) -> B (L2) -> C (L3)."""
    return [
        make_node("A", 1, Layer.L1),
        make_node("B", 5, Layer.L2, ["A"]),
        make_node("C", 10, Layer.L3, ["B"]),
    ]


@pytest.fixture
def curriculum_nodes():
    """Six-node curriculum spanning all three layers."""
    return [
        make_node("basic_vocabulary", 1, Layer.L1, time_estimate=30),
        make_node("elementary_concept", 2, Layer.L1, ["basic_vocabulary"],
                  kind=NodeKind.THEME, time_estimate=45),
        make_node("intermediate_vocabulary", 5, Layer.L2, ["basic_vocabulary"], time_estimate=60),
        make_node("middle_concept", 6, Layer.L2, ["elementary_concept", "intermediate_vocabulary"],
                  kind=NodeKind.THEME, time_estimate=90),
        make_node("advanced_vocabulary", 9, Layer.L3, ["intermediate_vocabulary"], time_estimate=120),
        make_node("college_concept", 10, Layer.L3, ["middle_concept", "advanced_vocabulary"],
                  kind=NodeKind.THEME, time_estimate=180),
    ]


@pytest.fixture
def curriculum_mastery():
    """Learner who knows the basics well and intermediate vocabulary poorly."""
    return {
        "basic_vocabulary": 0.9,
        "elementary_concept": 0.7,
        "intermediate_vocabulary": 0.3,
    }


@pytest.fixture
def snapshot_file(tmp_path, curriculum_nodes, curriculum_mastery):
    """Write the curriculum to a JSON snapshot file."""
    payload = {
        "nodes": [
            {
                "id": n.id,
                "type": n.kind.value,
                "difficulty": n.difficulty,
                "layer": n.layer.value,
                "prerequisites": list(n.prerequisites),
                "timeEstimate": n.time_estimate,
            }
            for n in curriculum_nodes
        ],
        "mastery": curriculum_mastery,
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def node_factory():
    """Return the make_node helper."""
    return make_node
