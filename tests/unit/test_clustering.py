"""Tests for category/connectivity clustering and difficulty hierarchy."""

from conceptnetwork.clustering import (
    cluster_concepts,
    depth_first_cluster,
    find_subclusters,
    get_concept_hierarchy,
)


def node(node_id, category="alg", difficulty_range=(1, 2)):
    return {"id": node_id, "category": category, "difficulty_range": list(difficulty_range)}


def link(source, target):
    return {"source": source, "target": target, "type": "related", "weight": 1.0}


class TestClusterConcepts:
    """Test primary and secondary clustering."""

    def test_split_disconnected_category(self):
        """A large category with two components is split in two."""
        nodes = [node("n1"), node("n2"), node("n3"), node("n4"), node("g1", "geo")]
        links = [link("n1", "n2"), link("n3", "n4")]

        clusters = cluster_concepts(nodes, links)

        assert list(clusters) == ["geo", "alg_1", "alg_2"]
        assert [n["id"] for n in clusters["alg_1"]] == ["n1", "n2"]
        assert [n["id"] for n in clusters["alg_2"]] == ["n3", "n4"]

    def test_connected_category_kept(self):
        """A connected category keeps its key."""
        nodes = [node("n1"), node("n2"), node("n3"), node("n4")]
        links = [link("n1", "n2"), link("n2", "n3"), link("n4", "n3")]

        clusters = cluster_concepts(nodes, links)

        assert list(clusters) == ["alg"]
        assert len(clusters["alg"]) == 4

    def test_small_category_not_split(self):
        """Categories of three nodes or fewer are never split."""
        nodes = [node("n1"), node("n2"), node("n3")]

        assert cluster_concepts(nodes, []) == {"alg": nodes}

    def test_links_outside_category_ignored(self):
        """Only links with both endpoints in the category connect it."""
        nodes = [node("n1"), node("n2"), node("n3"), node("n4"), node("g1", "geo")]
        links = [link("n1", "g1"), link("g1", "n2"), link("n3", "n4"), link("n1", "n2")]

        clusters = cluster_concepts(nodes, links)

        assert set(clusters) == {"geo", "alg_1", "alg_2"}


class TestFindSubclusters:
    """Test connectivity-based subclusters."""

    def test_node_dict_endpoints(self):
        """Link endpoints may be node dictionaries."""
        nodes = [node("n1"), node("n2"), node("n3"), node("n4")]
        links = [link(nodes[0], nodes[1]), link(nodes[2], nodes[3])]

        subclusters = find_subclusters(nodes, links)

        assert [[n["id"] for n in c] for c in subclusters] == [["n1", "n2"], ["n3", "n4"]]

    def test_all_isolated(self):
        """Isolated nodes each form their own subcluster."""
        nodes = [node(f"n{i}") for i in range(5)]

        assert len(find_subclusters(nodes, [])) == 5


class TestDepthFirstCluster:
    """Test depth-first component collection."""

    def test_visiting_order(self):
        """Nodes are visited depth-first with the last pushed node first."""
        nodes = [node("a"), node("b"), node("c"), node("d")]
        links = [link("a", "b"), link("a", "c"), link("c", "d")]
        visited = set()

        cluster = depth_first_cluster(nodes[0], nodes, links, visited)

        assert [n["id"] for n in cluster] == ["a", "c", "d", "b"]
        assert visited == {"a", "b", "c", "d"}

    def test_skips_visited(self):
        """Already visited nodes are not collected again."""
        nodes = [node("a"), node("b")]
        visited = {"a"}

        assert depth_first_cluster(nodes[0], nodes, [link("a", "b")], visited) == []


class TestConceptHierarchy:
    """Test difficulty levels."""

    def test_levels(self):
        """Nodes are grouped by the low end of their difficulty range."""
        nodes = [node("a", difficulty_range=(2, 3)), node("b", difficulty_range=(7, 9))]
        nodes.append({"id": "c", "category": "alg"})

        hierarchy = get_concept_hierarchy(nodes)

        assert hierarchy["max_level"] == 7
        assert [n["id"] for n in hierarchy["levels"][2]] == ["a"]
        assert [n["id"] for n in hierarchy["levels"][5]] == ["c"]
