#!/usr/bin/env python3
"""
Knowledge Graph Construction Module

This module builds the concept knowledge graph: one node per concept, one
typed and weighted edge per connected pair of concepts, and a symmetric
adjacency index used by the centrality and path algorithms.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .types import ConceptRecord, ConceptValidationError, ConnectionType

logger = logging.getLogger(__name__)

APPLICATION_INDICATORS = (
    "application",
    "applied",
    "real-world",
    "practical",
    "physics",
    "engineering",
    "economics",
    "computer science",
)

MAX_CONNECTION_WEIGHT = 3.0


@dataclass
class GraphNode:
    """Represents a concept node in the knowledge graph."""

    concept: ConceptRecord
    in_degree: int = 0
    out_degree: int = 0

    # Centrality measures (populated once after all edges exist)
    degree_centrality: float = 0.0
    betweenness_centrality: float = 0.0
    page_rank_centrality: float = 0.0
    centrality: float = 0.0

    @property
    def id(self) -> str:
        return self.concept.id

    @property
    def title(self) -> str:
        return self.concept.title

    @property
    def category(self) -> str:
        return self.concept.category

    @property
    def difficulty_range(self) -> Tuple[int, int]:
        return self.concept.difficulty_range

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        result = self.concept.to_dict()
        result.update(
            {
                "in_degree": self.in_degree,
                "out_degree": self.out_degree,
                "degree_centrality": self.degree_centrality,
                "betweenness_centrality": self.betweenness_centrality,
                "page_rank_centrality": self.page_rank_centrality,
                "centrality": self.centrality,
            }
        )
        return result


@dataclass
class GraphEdge:
    """Represents a connection between two concepts."""

    source: str
    target: str
    type: ConnectionType
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert edge to dictionary representation."""
        return {
            "source": self.source,
            "target": self.target,
            "type": self.type.value,
            "weight": self.weight,
        }


@dataclass
class KnowledgeGraph:
    """Nodes, edges and adjacency index of a concept network.

    Edges are keyed by ``"{source}-{target}"``. The adjacency index is
    symmetric and lists neighbours in the order their edges were created.
    """

    nodes: Dict[str, GraphNode] = field(default_factory=dict)
    edges: Dict[str, GraphEdge] = field(default_factory=dict)
    adjacency_list: Dict[str, List[str]] = field(default_factory=dict)
    missing_references: List[Tuple[str, str]] = field(default_factory=list)

    def get_edge(self, source_id: str, target_id: str) -> Optional[GraphEdge]:
        """Get the edge stored under the forward key only."""
        return self.edges.get(edge_key(source_id, target_id))

    def has_connection(self, first_id: str, second_id: str) -> bool:
        """Check whether an edge exists between two concepts in either direction."""
        return (
            edge_key(first_id, second_id) in self.edges
            or edge_key(second_id, first_id) in self.edges
        )

    def neighbors(self, concept_id: str) -> List[str]:
        return self.adjacency_list.get(concept_id, [])

    def add_node(self, concept: ConceptRecord) -> GraphNode:
        node = GraphNode(concept=concept)
        self.nodes[concept.id] = node
        self.adjacency_list[concept.id] = []
        return node

    def add_edge(self, source: ConceptRecord, target: ConceptRecord) -> Optional[GraphEdge]:
        """Add an edge between two concepts unless one already exists.

        Args:
            source: Concept declaring the connection
            target: Referenced concept

        Returns:
            The new GraphEdge, or None if the pair was already connected
        """
        if self.has_connection(source.id, target.id):
            return None

        edge = GraphEdge(
            source=source.id,
            target=target.id,
            type=determine_connection_type(source, target),
            weight=calculate_connection_weight(source, target),
        )
        self.edges[edge_key(source.id, target.id)] = edge

        self.adjacency_list[source.id].append(target.id)
        if source.id != target.id:
            self.adjacency_list[target.id].append(source.id)

        self.nodes[source.id].out_degree += 1
        self.nodes[target.id].in_degree += 1
        return edge


def edge_key(source_id: str, target_id: str) -> str:
    """Key under which the edge from source to target is stored."""
    return f"{source_id}-{target_id}"


def determine_connection_type(source: ConceptRecord, target: ConceptRecord) -> ConnectionType:
    """Determine the type of connection between two concepts.

    A target that starts at least two levels above where the source ends is
    a prerequisite connection; this check wins over the application check.

    Args:
        source: Concept declaring the connection
        target: Referenced concept

    Returns:
        ConnectionType of the edge
    """
    difficulty_diff = target.difficulty_low - source.difficulty_high
    if difficulty_diff >= 2:
        return ConnectionType.PREREQUISITE

    if is_application_connection(source, target):
        return ConnectionType.APPLICATION

    return ConnectionType.RELATED


def is_application_connection(first: ConceptRecord, second: ConceptRecord) -> bool:
    """Check whether either concept mentions an applied domain."""
    first_text = f"{first.title} {' '.join(first.tags)}".lower()
    second_text = f"{second.title} {' '.join(second.tags)}".lower()

    return any(
        indicator in first_text or indicator in second_text
        for indicator in APPLICATION_INDICATORS
    )


def calculate_connection_weight(source: ConceptRecord, target: ConceptRecord) -> float:
    """Calculate connection weight from concept similarity.

    Args:
        source: Concept declaring the connection
        target: Referenced concept

    Returns:
        Weight in the range [1.0, 3.0]
    """
    weight = 1.0

    if source.category == target.category:
        weight += 0.5

    common_tags = [tag for tag in source.tags if tag in target.tags]
    weight += len(common_tags) * 0.2

    difficulty_diff = abs(source.difficulty_low - target.difficulty_low)
    weight += max(0.0, 1 - difficulty_diff * 0.1)

    return min(MAX_CONNECTION_WEIGHT, weight)


def build_knowledge_graph(
    concepts: Sequence[ConceptRecord], strict_references: bool = False
) -> KnowledgeGraph:
    """Build the knowledge graph from a concept database.

    Centrality is not computed here; see ``centrality.calculate_centrality_measures``.

    Args:
        concepts: Concept records in database order
        strict_references: Raise instead of skipping connections to unknown ids

    Returns:
        Constructed KnowledgeGraph

    Raises:
        ConceptValidationError: On duplicate ids, or on unknown references
            when strict_references is set
    """
    logger.info(f"Building knowledge graph from {len(concepts)} concepts")
    graph = KnowledgeGraph()

    for concept in concepts:
        if concept.id in graph.nodes:
            raise ConceptValidationError(f"Duplicate concept id '{concept.id}'")
        graph.add_node(concept)

    for concept in concepts:
        for connection_id in concept.connections:
            target_node = graph.nodes.get(connection_id)
            if target_node is None:
                if strict_references:
                    raise ConceptValidationError(
                        f"Concept '{concept.id}' references unknown concept '{connection_id}'"
                    )
                logger.debug(
                    f"Skipping connection {concept.id} -> {connection_id}: unknown concept"
                )
                graph.missing_references.append((concept.id, connection_id))
                continue

            graph.add_edge(concept, target_node.concept)

    if graph.missing_references:
        logger.warning(
            f"Ignored {len(graph.missing_references)} connections to unknown concepts"
        )

    logger.info(
        f"Knowledge graph built: {len(graph.nodes)} nodes, {len(graph.edges)} edges"
    )
    return graph
