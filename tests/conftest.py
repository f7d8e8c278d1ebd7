"""Test configuration and fixtures for the concept network.

Provides small hand-built concept databases, an isolated configuration
that ignores CONCEPTNETWORK_* environment variables, and engines built
from them.
"""

import os
from unittest.mock import patch

import pytest

from conceptnetwork.config import Config
from conceptnetwork.engine import ConceptNetworkEngine


def make_concept(
    concept_id,
    difficulty_range,
    connections=(),
    category="alg",
    title=None,
    tags=(),
):
    """Build a plain concept mapping as stored in a concept database."""
    return {
        "id": concept_id,
        "title": title or concept_id.replace("_", " ").title(),
        "category": category,
        "tags": list(tags),
        "difficulty_range": list(difficulty_range),
        "connections": list(connections),
    }


@pytest.fixture
def concept_factory():
    """Provide the concept mapping builder to tests."""
    return make_concept


@pytest.fixture
def isolated_env():
    """Clear CONCEPTNETWORK_* variables and skip .env loading."""
    clean_env = {k: v for k, v in os.environ.items() if not k.startswith("CONCEPTNETWORK_")}
    with patch.dict(os.environ, clean_env, clear=True):
        with patch("conceptnetwork.config.load_dotenv"):
            yield


@pytest.fixture
def test_config(isolated_env):
    """Provide a default configuration independent of the environment."""
    return Config()


@pytest.fixture
def prerequisite_pair():
    """Two concepts listing each other, four levels apart."""
    return [
        make_concept("a", [1, 2], ["b"]),
        make_concept("b", [4, 5], ["a"]),
    ]


@pytest.fixture
def line_concepts():
    """Concepts forming the path a - b - c."""
    return [
        make_concept("a", [1, 2], ["b"]),
        make_concept("b", [2, 3], ["a", "c"]),
        make_concept("c", [3, 4], ["b"]),
    ]


@pytest.fixture
def sample_concepts():
    """A small database with two categories and an isolated concept."""
    return [
        make_concept("seed", [5, 5], ["near", "far"], title="Quadratic Equations"),
        make_concept("near", [5, 6], ["seed"], title="Polynomials"),
        make_concept("far", [9, 9], ["seed"], title="Abstract Algebra"),
        make_concept("peer", [4, 5], [], title="Linear Systems"),
        make_concept(
            "quantum",
            [8, 10],
            ["missing_concept"],
            category="physics",
            title="Quantum Mechanics",
            tags=["physics", "applied"],
        ),
        make_concept("lonely", [3, 3], [], category="geometry", title="Triangles"),
    ]


@pytest.fixture
def sample_engine(sample_concepts, test_config):
    """Engine over the sample database."""
    return ConceptNetworkEngine(sample_concepts, config=test_config)


@pytest.fixture
def core_engine(test_config):
    """Engine over the bundled core concept database."""
    return ConceptNetworkEngine(config=test_config)


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (skipped only with --fast flag)"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_addoption(parser):
    """Add command line options."""
    parser.addoption(
        "--fast",
        action="store_true",
        default=False,
        help="skip slow tests for faster execution",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests only when --fast is given."""
    if not config.getoption("--fast"):
        return

    skip_slow = pytest.mark.skip(
        reason="slow test skipped (use without --fast to include)"
    )
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)
