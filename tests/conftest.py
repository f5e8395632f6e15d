"""
Test fixtures for whiteboard-ingestor.

Provides a TestClient for the API, a small alias lexicon for classifier
tests, and a couple of sample boards.
"""

import sys
from pathlib import Path
from typing import List

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import whiteboard_ingestor...`
for p in {ROOT, SRC}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from whiteboard_ingestor.main import app
from whiteboard_ingestor.services.movement_normalizer import MovementLexicon


# ---------------------------------------------------------------------------
# Core Test Client
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def api_client() -> TestClient:
    """Shared FastAPI TestClient for whiteboard-ingestor."""
    return TestClient(app)


# ---------------------------------------------------------------------------
# Lexicon Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def default_lexicon() -> MovementLexicon:
    """The bundled alias lexicon."""
    return MovementLexicon.default()


@pytest.fixture
def tiny_lexicon() -> MovementLexicon:
    """A hand-built lexicon for tests that should not depend on the bundled data."""
    return MovementLexicon({
        "Double Unders": ["du", "dus", "double under"],
        "Wall Ball": ["wb", "wall balls"],
        "Box Jump": ["bj", "box jumps"],
        "Bike": ["bike", "assault bike"],
        "Ski": ["ski", "ski erg"],
    })


# ---------------------------------------------------------------------------
# Sample Boards
# ---------------------------------------------------------------------------


@pytest.fixture
def amrap_lines() -> List[str]:
    """10 minute AMRAP with a rounds + reps score and a date."""
    return [
        "AMRAP | | 10 min",
        "30 | DU |",
        "10 | bike | cal",
        "8 | + | 25 | 11/16/25",
    ]


@pytest.fixture
def emom_lines() -> List[str]:
    """Interval board with one time per round."""
    return [
        "E3MOM",
        "10 | Burpees",
        "15 | WB | 20 lbs",
        "1:38",
        "2:22",
        "1:55",
    ]
