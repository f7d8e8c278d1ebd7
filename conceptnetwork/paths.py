"""Learning path search over the concept knowledge graph.

Learning paths minimize a traversal cost that penalizes large difficulty
jumps and category changes and discounts prerequisite edges.
"""

import heapq
import itertools
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .knowledge_graph import KnowledgeGraph
from .types import ConnectionType

logger = logging.getLogger(__name__)

CachedPath = Optional[Tuple[str, ...]]


class PathCache:
    """Append-only memo of learning paths keyed by ``"{from_id}-{to_id}"``.

    Unreachable pairs are cached as None. Entries are never evicted; the
    graph does not change for the lifetime of an engine.
    """

    def __init__(self) -> None:
        self._paths: Dict[str, CachedPath] = {}

    @staticmethod
    def make_key(from_id: str, to_id: str) -> str:
        return f"{from_id}-{to_id}"

    def __contains__(self, key: str) -> bool:
        return key in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def get(self, key: str) -> CachedPath:
        return self._paths.get(key)

    def put(self, key: str, titles: Optional[Sequence[str]]) -> None:
        self._paths[key] = tuple(titles) if titles is not None else None


def calculate_learning_cost(graph: KnowledgeGraph, from_id: str, to_id: str) -> float:
    """Calculate the cost of moving from one concept to a neighbouring one.

    Args:
        graph: Knowledge graph
        from_id: ID of the current concept
        to_id: ID of the next concept

    Returns:
        Traversal cost, or math.inf when either concept is unknown
    """
    from_node = graph.nodes.get(from_id)
    to_node = graph.nodes.get(to_id)
    if from_node is None or to_node is None:
        return math.inf

    cost = 1.0

    difficulty_jump = to_node.difficulty_range[0] - from_node.difficulty_range[1]
    if difficulty_jump > 1:
        cost += difficulty_jump * 0.5

    if from_node.category != to_node.category:
        cost += 0.3

    # Only the forward key is consulted
    edge = graph.get_edge(from_id, to_id)
    if edge is not None and edge.type == ConnectionType.PREREQUISITE:
        cost *= 0.7

    return cost


def find_optimal_learning_path(
    graph: KnowledgeGraph, source_id: str, target_id: str
) -> Optional[List[str]]:
    """Find the cheapest learning path between two concepts.

    Uniform-cost search; entries with equal cost are expanded in the order
    they were queued. The search stops as soon as the target is dequeued.

    Args:
        graph: Knowledge graph
        source_id: ID of the starting concept
        target_id: ID of the goal concept

    Returns:
        List of concept IDs from source to target, or None if unreachable
    """
    if source_id not in graph.nodes or target_id not in graph.nodes:
        return None

    distances: Dict[str, float] = {source_id: 0.0}
    paths: Dict[str, List[str]] = {source_id: [source_id]}
    counter = itertools.count()
    queue = [(0.0, next(counter), source_id)]

    while queue:
        _, _, current_id = heapq.heappop(queue)

        if current_id == target_id:
            return paths[target_id]

        current_cost = distances[current_id]
        current_path = paths[current_id]

        for neighbor_id in graph.neighbors(current_id):
            new_cost = current_cost + calculate_learning_cost(graph, current_id, neighbor_id)

            if neighbor_id not in distances or new_cost < distances[neighbor_id]:
                distances[neighbor_id] = new_cost
                paths[neighbor_id] = current_path + [neighbor_id]
                heapq.heappush(queue, (new_cost, next(counter), neighbor_id))

    logger.debug(f"No learning path from {source_id} to {target_id}")
    return None
