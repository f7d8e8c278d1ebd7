"""ConceptNetwork - a knowledge graph and learning path engine for math concepts."""

from importlib import metadata as _metadata

from .config import Config
from .engine import ConceptNetworkEngine
from .knowledge_graph import GraphEdge, GraphNode, KnowledgeGraph, build_knowledge_graph
from .loader import load_concepts, load_default_concepts
from .types import (
    ConceptNetworkError,
    ConceptRecord,
    ConceptValidationError,
    ConnectionType,
)

try:  # pragma: no cover - exercised when installed as a package
    __version__ = _metadata.version("conceptnetwork")
except _metadata.PackageNotFoundError:  # pragma: no cover - local editable installs
    __version__ = "0.1.0"

__license__ = "MIT"

__all__ = [
    "ConceptNetworkEngine",
    "Config",
    "ConceptRecord",
    "ConnectionType",
    "ConceptNetworkError",
    "ConceptValidationError",
    "KnowledgeGraph",
    "GraphNode",
    "GraphEdge",
    "build_knowledge_graph",
    "load_concepts",
    "load_default_concepts",
    "__version__",
]
