"""Concept network engine.

The engine owns a knowledge graph built once from a static concept
database, with centrality precomputed at construction. All public methods
are reads over that graph; learning paths are memoized in a PathCache.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .centrality import calculate_centrality_measures
from .clustering import cluster_concepts, get_concept_hierarchy
from .config import Config
from .knowledge_graph import KnowledgeGraph, build_knowledge_graph
from .loader import load_concepts, load_default_concepts, parse_concepts
from .paths import PathCache, find_optimal_learning_path
from .types import ConceptRecord, ConnectionType

logger = logging.getLogger(__name__)

SHORT_NAME_ABBREVIATIONS = {
    "derivative": "f'",
    "integral": "∫",
    "limit": "lim",
    "function": "f(x)",
    "equation": "eq",
    "theorem": "thm",
    "probability": "P",
    "statistics": "stats",
    "triangle": "△",
    "circle": "○",
    "square": "□",
    "natural numbers": "ℕ",
    "integers": "ℤ",
    "rational numbers": "ℚ",
    "real numbers": "ℝ",
    "complex numbers": "ℂ",
}

DIRECT_REASON = "Directly related concept"
CATEGORY_REASON = "Same category, appropriate level"


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def get_short_name(title: str) -> str:
    """Create a short display name for a concept title."""
    lower_title = title.lower()
    for full, abbreviation in SHORT_NAME_ABBREVIATIONS.items():
        if full in lower_title:
            return abbreviation

    words = title.split(" ")
    if len(words) > 1:
        return words[0]
    return title[:8] + "..." if len(title) > 8 else title


def calculate_network_statistics(
    nodes: Sequence[Mapping[str, Any]], links: Sequence[Any]
) -> Dict[str, Any]:
    """Calculate summary statistics for a set of nodes and links.

    Args:
        nodes: Node dictionaries with ``category`` and ``difficulty_range``
        links: Links or edges between the nodes (only counted)

    Returns:
        Dictionary with totals, density (percent), average connections,
        category count and difficulty span
    """
    total_concepts = len(nodes)
    total_connections = len(links)
    max_possible_connections = (total_concepts * (total_concepts - 1)) / 2

    density = (
        int(_round_half_up(total_connections / max_possible_connections * 100))
        if max_possible_connections > 0
        else 0
    )
    avg_connections = (
        _round_half_up(total_connections * 2 / total_concepts, 1)
        if total_concepts > 0
        else 0
    )

    if nodes:
        difficulty_levels = (
            max(node["difficulty_range"][1] for node in nodes)
            - min(node["difficulty_range"][0] for node in nodes)
            + 1
        )
    else:
        difficulty_levels = 0

    return {
        "total_concepts": total_concepts,
        "total_connections": total_connections,
        "density": density,
        "avg_connections": avg_connections,
        "categories": len({node["category"] for node in nodes}),
        "difficulty_levels": difficulty_levels,
    }


class ConceptNetworkEngine:
    """Knowledge graph over a concept database with path and query support.

    The graph and its centrality measures are computed once in the
    constructor and never change afterwards.
    """

    def __init__(
        self,
        concepts: Optional[Iterable[Union[ConceptRecord, Mapping[str, Any]]]] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            concepts: Concept database; when omitted it is loaded from
                ``config.concepts_file`` or the bundled core database
            config: Engine configuration; defaults to ``Config()``
        """
        self.config = config or Config()

        if concepts is None:
            if self.config.concepts_file is not None:
                records = load_concepts(self.config.concepts_file)
            else:
                records = load_default_concepts()
        else:
            records = parse_concepts(concepts)

        self.concepts: List[ConceptRecord] = records
        self.network_graph: KnowledgeGraph = build_knowledge_graph(
            records, strict_references=self.config.strict_references
        )
        calculate_centrality_measures(
            self.network_graph, **self.config.get_centrality_config()
        )
        self.path_cache = PathCache()

    def _find_concept_by_id(self, concept_id: str) -> Optional[ConceptRecord]:
        node = self.network_graph.nodes.get(concept_id)
        return node.concept if node else None

    def _find_concept_by_title(self, query: str) -> Optional[ConceptRecord]:
        query_lower = query.lower()
        return next(
            (concept for concept in self.concepts if query_lower in concept.title.lower()),
            None,
        )

    def build_concept_network(
        self,
        category_filter: str = "all",
        connection_types: Optional[Iterable[Union[str, ConnectionType]]] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Build a visualization-ready view of the network.

        Args:
            category_filter: Category to keep, or "all"
            connection_types: Allowed edge types; all types when omitted

        Returns:
            Dictionary with "nodes" and "links" lists

        Raises:
            ValueError: If a connection type name is unknown
        """
        if connection_types is None:
            allowed_types = set(ConnectionType)
        else:
            allowed_types = {ConnectionType(t) for t in connection_types}

        nodes = []
        for node_id, node in self.network_graph.nodes.items():
            if category_filter == "all" or node.category == category_filter:
                nodes.append(
                    {
                        "id": node_id,
                        "title": node.title,
                        "short_name": get_short_name(node.title),
                        "category": node.category,
                        "difficulty_range": list(node.difficulty_range),
                        "centrality": node.centrality,
                        "connections": list(node.concept.connections),
                    }
                )

        node_ids = {node["id"] for node in nodes}

        links = [
            edge.to_dict()
            for edge in self.network_graph.edges.values()
            if edge.type in allowed_types
            and edge.source in node_ids
            and edge.target in node_ids
        ]

        return {"nodes": nodes, "links": links}

    def cluster_concepts(
        self,
        category_filter: str = "all",
        connection_types: Optional[Iterable[Union[str, ConnectionType]]] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Cluster the filtered network view by category and connectivity."""
        network = self.build_concept_network(category_filter, connection_types)
        return cluster_concepts(network["nodes"], network["links"])

    def get_concept_hierarchy(self, category_filter: str = "all") -> Dict[str, Any]:
        """Group the filtered network view into difficulty levels."""
        network = self.build_concept_network(category_filter)
        return get_concept_hierarchy(network["nodes"])

    def find_learning_path(self, from_title: str, to_title: str) -> Optional[List[str]]:
        """Find a learning path between two concepts given by title.

        Each title is matched case-insensitively as a substring of concept
        titles; the first matching concept in database order is used.

        Args:
            from_title: Title (or part of it) of the starting concept
            to_title: Title (or part of it) of the goal concept

        Returns:
            List of concept titles, or None if a title does not match or
            the goal is unreachable
        """
        from_concept = self._find_concept_by_title(from_title)
        to_concept = self._find_concept_by_title(to_title)
        if from_concept is None or to_concept is None:
            return None

        cache_key = PathCache.make_key(from_concept.id, to_concept.id)
        if cache_key in self.path_cache:
            cached = self.path_cache.get(cache_key)
            return list(cached) if cached is not None else None

        path = self.find_optimal_learning_path(from_concept.id, to_concept.id)
        path_titles = (
            [self.network_graph.nodes[concept_id].title for concept_id in path]
            if path is not None
            else None
        )

        self.path_cache.put(cache_key, path_titles)
        logger.debug(f"Cached learning path {cache_key}: {path_titles}")
        return path_titles

    def find_optimal_learning_path(self, source_id: str, target_id: str) -> Optional[List[str]]:
        """Find the cheapest learning path between two concept IDs."""
        return find_optimal_learning_path(self.network_graph, source_id, target_id)

    def search_concepts(self, query: Optional[str]) -> List[Dict[str, Any]]:
        """Search concepts by title, category or tag.

        Args:
            query: Case-insensitive substring; shorter than 2 characters
                returns nothing

        Returns:
            Up to ``config.search_limit`` concept summaries
        """
        if not query or len(query) < 2:
            return []

        query_lower = query.lower()
        results = []

        for concept in self.concepts:
            if (
                query_lower in concept.title.lower()
                or query_lower in concept.category.lower()
                or any(query_lower in tag.lower() for tag in concept.tags)
            ):
                results.append(
                    {
                        "id": concept.id,
                        "title": concept.title,
                        "category": concept.category,
                        "difficulty_range": list(concept.difficulty_range),
                    }
                )
                if len(results) >= self.config.search_limit:
                    break

        return results

    def get_concept_details(self, concept_id: str) -> Optional[Dict[str, Any]]:
        """Get a concept with its centrality and resolved neighbours."""
        node = self.network_graph.nodes.get(concept_id)
        if node is None:
            return None

        connections = self.network_graph.neighbors(concept_id)
        details = node.concept.to_dict()
        details.update(
            {
                "centrality": node.centrality,
                "connection_count": len(connections),
                "connected_concepts": [
                    {
                        "id": neighbor.id,
                        "title": neighbor.title,
                        "category": neighbor.category,
                    }
                    for neighbor in (
                        self.network_graph.nodes[neighbor_id] for neighbor_id in connections
                    )
                ],
            }
        )
        return details

    def generate_recommendations(
        self,
        concept_id: str,
        user_level: Optional[int] = None,
        max_recommendations: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Recommend concepts to study after the given one.

        Neighbours within two levels of the user are scored by centrality
        plus level proximity; same-category concepts within one level are
        added after them.

        Args:
            concept_id: ID of the current concept
            user_level: User difficulty level (defaults to config)
            max_recommendations: Maximum entries to return (defaults to config)

        Returns:
            Recommendations sorted by descending relevance score
        """
        if user_level is None:
            user_level = self.config.default_user_level
        if max_recommendations is None:
            max_recommendations = self.config.max_recommendations

        node = self.network_graph.nodes.get(concept_id)
        if node is None:
            return []

        recommendations: List[Dict[str, Any]] = []
        recommended_ids = set()

        for connected_id in self.network_graph.neighbors(concept_id):
            connected = self.network_graph.nodes[connected_id]
            level_delta = abs(connected.difficulty_range[0] - user_level)
            if connected_id != concept_id and level_delta <= 2:
                recommendations.append(
                    {
                        "id": connected_id,
                        "title": connected.title,
                        "reason": DIRECT_REASON,
                        "relevance_score": connected.centrality + (2 - level_delta),
                    }
                )
                recommended_ids.add(connected_id)

        for other in self.concepts:
            level_delta = abs(other.difficulty_low - user_level)
            if (
                other.id != concept_id
                and other.category == node.category
                and level_delta <= 1
                and other.id not in recommended_ids
            ):
                recommendations.append(
                    {
                        "id": other.id,
                        "title": other.title,
                        "reason": CATEGORY_REASON,
                        "relevance_score": 1 + (1 - level_delta),
                    }
                )
                recommended_ids.add(other.id)

        recommendations.sort(key=lambda r: r["relevance_score"], reverse=True)
        return recommendations[:max_recommendations]

    def calculate_network_statistics(
        self,
        nodes: Optional[Sequence[Mapping[str, Any]]] = None,
        links: Optional[Sequence[Any]] = None,
    ) -> Dict[str, Any]:
        """Calculate statistics for the given view, or the whole graph."""
        if nodes is None:
            nodes = [node.to_dict() for node in self.network_graph.nodes.values()]
        if links is None:
            links = list(self.network_graph.edges.values())
        return calculate_network_statistics(nodes, links)

    def export_network_data(self) -> Dict[str, Any]:
        """Export all nodes, edges and statistics as plain data."""
        nodes = [node.to_dict() for node in self.network_graph.nodes.values()]
        edges = [edge.to_dict() for edge in self.network_graph.edges.values()]
        return {
            "nodes": nodes,
            "edges": edges,
            "statistics": calculate_network_statistics(nodes, edges),
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get a short status summary of the engine."""
        return {
            "concepts": len(self.concepts),
            "edges": len(self.network_graph.edges),
            "missing_references": len(self.network_graph.missing_references),
            "cached_paths": len(self.path_cache),
        }
