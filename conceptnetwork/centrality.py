"""Centrality analysis for the concept knowledge graph.

Degree, betweenness and PageRank-style centrality are computed once, right
after the graph is built, and stored on the graph nodes. PageRank uses the
adjacency index as an undirected graph.
"""

import logging
from collections import deque
from typing import Dict, List

import numpy as np

from .knowledge_graph import KnowledgeGraph

logger = logging.getLogger(__name__)

DEFAULT_DAMPING = 0.85
DEFAULT_ITERATIONS = 50


def calculate_shortest_paths(graph: KnowledgeGraph, source_id: str) -> Dict[str, List[str]]:
    """Find one unweighted shortest path from a source to every reachable node.

    Neighbours are expanded in adjacency order, so the first path discovered
    by BFS is the one returned.

    Args:
        graph: Knowledge graph
        source_id: ID of the source concept

    Returns:
        Mapping of reachable node ID to the list of IDs from source to it
    """
    if source_id not in graph.nodes:
        return {}

    paths: Dict[str, List[str]] = {source_id: [source_id]}
    queue = deque([source_id])

    while queue:
        current_id = queue.popleft()
        current_path = paths[current_id]

        for neighbor_id in graph.neighbors(current_id):
            if neighbor_id not in paths:
                paths[neighbor_id] = current_path + [neighbor_id]
                queue.append(neighbor_id)

    return paths


def calculate_degree_centrality(graph: KnowledgeGraph) -> None:
    """Store (in + out degree) / (n - 1) on every node."""
    node_count = len(graph.nodes)
    for node in graph.nodes.values():
        total_degree = node.in_degree + node.out_degree
        node.degree_centrality = total_degree / (node_count - 1) if node_count > 1 else 0.0


def calculate_betweenness_centrality(graph: KnowledgeGraph) -> Dict[str, int]:
    """Store normalized betweenness on every node.

    Only the single BFS-discovered path per (source, target) pair is
    credited, not every shortest path.

    Returns:
        Raw intermediate-node counts keyed by node ID
    """
    betweenness = {node_id: 0 for node_id in graph.nodes}

    for source_id in graph.nodes:
        shortest_paths = calculate_shortest_paths(graph, source_id)

        for target_id in graph.nodes:
            if target_id == source_id:
                continue
            path = shortest_paths.get(target_id)
            if path and len(path) > 2:
                for intermediate_id in path[1:-1]:
                    betweenness[intermediate_id] += 1

    max_betweenness = max(betweenness.values(), default=0)
    for node_id, node in graph.nodes.items():
        node.betweenness_centrality = (
            betweenness[node_id] / max_betweenness if max_betweenness > 0 else 0.0
        )

    return betweenness


def page_rank_scores(
    graph: KnowledgeGraph,
    damping: float = DEFAULT_DAMPING,
    iterations: int = DEFAULT_ITERATIONS,
) -> Dict[str, float]:
    """Run synchronous PageRank power iteration over the adjacency index.

    Each iteration computes ``(1 - d) / n + d * sum(rank(m) / |adj(m)|)``
    over the neighbours m of every node. Nodes without neighbours
    contribute nothing.

    Args:
        graph: Knowledge graph
        damping: Damping factor
        iterations: Exact number of iterations to run

    Returns:
        Raw (unnormalized) rank keyed by node ID
    """
    node_ids = list(graph.nodes)
    node_count = len(node_ids)
    if node_count == 0:
        return {}

    index = {node_id: i for i, node_id in enumerate(node_ids)}

    # One entry per adjacency slot: rank flows from sources[k] to targets[k]
    sources: List[int] = []
    targets: List[int] = []
    for node_id in node_ids:
        for neighbor_id in graph.neighbors(node_id):
            sources.append(index[node_id])
            targets.append(index[neighbor_id])

    sources_arr = np.asarray(sources, dtype=np.intp)
    targets_arr = np.asarray(targets, dtype=np.intp)
    out_degree = np.bincount(sources_arr, minlength=node_count).astype(np.float64)
    share = np.divide(1.0, out_degree, out=np.zeros(node_count), where=out_degree > 0)

    rank = np.full(node_count, 1.0 / node_count, dtype=np.float64)
    teleport = (1 - damping) / node_count
    for _ in range(iterations):
        flow = (rank * share)[sources_arr]
        rank = teleport + damping * np.bincount(targets_arr, weights=flow, minlength=node_count)

    logger.debug(f"PageRank mass after {iterations} iterations: {rank.sum():.6f}")
    return {node_id: float(rank[i]) for node_id, i in index.items()}


def calculate_page_rank_centrality(
    graph: KnowledgeGraph,
    damping: float = DEFAULT_DAMPING,
    iterations: int = DEFAULT_ITERATIONS,
) -> None:
    """Store PageRank normalized so the top node scores 1.0.

    The normalized value is also the node's canonical ``centrality``.
    """
    scores = page_rank_scores(graph, damping, iterations)
    if not scores:
        return

    max_rank = max(scores.values())
    for node_id, node in graph.nodes.items():
        node.page_rank_centrality = scores[node_id] / max_rank if max_rank > 0 else 0.0
        node.centrality = node.page_rank_centrality


def calculate_centrality_measures(
    graph: KnowledgeGraph,
    damping: float = DEFAULT_DAMPING,
    iterations: int = DEFAULT_ITERATIONS,
) -> KnowledgeGraph:
    """Compute every centrality measure and store it on the graph nodes."""
    logger.info("Analyzing knowledge graph centrality...")

    calculate_degree_centrality(graph)
    calculate_betweenness_centrality(graph)
    calculate_page_rank_centrality(graph, damping, iterations)

    if graph.nodes:
        top = max(graph.nodes.values(), key=lambda node: node.centrality)
        logger.info(f"Most central concept: {top.title} ({top.id})")

    return graph
