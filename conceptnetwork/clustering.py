"""Clustering of network views by category and connectivity.

These helpers work on the plain ``{"nodes", "links"}`` view produced by
``ConceptNetworkEngine.build_concept_network``. Link endpoints may be
given either as node IDs or as node dictionaries.
"""

from collections import defaultdict
from typing import Any, Dict, List, Sequence, Set

NetworkNode = Dict[str, Any]
NetworkLink = Dict[str, Any]

MIN_SUBCLUSTER_CATEGORY_SIZE = 4


def _endpoint_id(endpoint: Any) -> Any:
    if isinstance(endpoint, dict):
        return endpoint.get("id")
    return endpoint


def cluster_concepts(
    nodes: Sequence[NetworkNode], links: Sequence[NetworkLink]
) -> Dict[str, List[NetworkNode]]:
    """Cluster nodes by category, then split categories into connected parts.

    A category that splits into several connected components is replaced
    by keys ``"{category}_1"``, ``"{category}_2"``, ... in discovery order.

    Args:
        nodes: Network view nodes
        links: Network view links

    Returns:
        Mapping of cluster key to its nodes
    """
    clusters: Dict[str, List[NetworkNode]] = {}
    for node in nodes:
        clusters.setdefault(node["category"], []).append(node)

    for category in list(clusters):
        subclusters = find_subclusters(clusters[category], links)
        if len(subclusters) > 1:
            for i, subcluster in enumerate(subclusters, start=1):
                clusters[f"{category}_{i}"] = subcluster
            del clusters[category]

    return clusters


def find_subclusters(
    nodes: Sequence[NetworkNode], links: Sequence[NetworkLink]
) -> List[List[NetworkNode]]:
    """Split nodes into components connected by links internal to them.

    Groups of three nodes or fewer are never split.

    Returns:
        List of components, or ``[nodes]`` when there is at most one
    """
    if len(nodes) < MIN_SUBCLUSTER_CATEGORY_SIZE:
        return [list(nodes)]

    node_ids = {node["id"] for node in nodes}
    internal_links = [
        link
        for link in links
        if _endpoint_id(link["source"]) in node_ids and _endpoint_id(link["target"]) in node_ids
    ]

    visited: Set[Any] = set()
    subclusters = []

    for node in nodes:
        if node["id"] not in visited:
            cluster = depth_first_cluster(node, nodes, internal_links, visited)
            if cluster:
                subclusters.append(cluster)

    return subclusters if len(subclusters) > 1 else [list(nodes)]


def depth_first_cluster(
    start_node: NetworkNode,
    all_nodes: Sequence[NetworkNode],
    links: Sequence[NetworkLink],
    visited: Set[Any],
) -> List[NetworkNode]:
    """Collect the component containing start_node with an explicit stack.

    Args:
        start_node: Node to start from
        all_nodes: Nodes that may join the component
        links: Links to follow, in either direction
        visited: IDs already assigned to a component; updated in place

    Returns:
        Nodes of the component in visiting order
    """
    nodes_by_id: Dict[Any, NetworkNode] = {}
    for node in all_nodes:
        nodes_by_id.setdefault(node["id"], node)

    cluster = []
    stack = [start_node]

    while stack:
        node = stack.pop()
        if node["id"] in visited:
            continue

        visited.add(node["id"])
        cluster.append(node)

        for link in links:
            source_id = _endpoint_id(link["source"])
            target_id = _endpoint_id(link["target"])

            if source_id == node["id"] and target_id not in visited:
                if target_id in nodes_by_id:
                    stack.append(nodes_by_id[target_id])
            if target_id == node["id"] and source_id not in visited:
                if source_id in nodes_by_id:
                    stack.append(nodes_by_id[source_id])

    return cluster


def get_concept_hierarchy(nodes: Sequence[NetworkNode]) -> Dict[str, Any]:
    """Group nodes into levels by the low end of their difficulty range.

    Nodes without a difficulty range are placed on level 5.
    """
    levels: Dict[int, List[NetworkNode]] = defaultdict(list)
    max_level = 0

    for node in nodes:
        difficulty_range = node.get("difficulty_range")
        level = difficulty_range[0] if difficulty_range else 5
        levels[level].append(node)
        max_level = max(max_level, level)

    return {"levels": dict(levels), "max_level": max_level}
