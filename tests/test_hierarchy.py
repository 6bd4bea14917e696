"""Tests for topic tree assembly and recursive subdivision."""

import json
import math

import numpy as np
import pytest

from doctopictree import (
    ClusteringConfig,
    DEFAULT_LEXICON,
    Document,
    HierarchyBuilder,
    hierarchy_frame,
    iter_leaves,
)


NEURAL = "Neural networks learn layered representations for image recognition."
QUANTUM = "Quantum computing manipulates qubits through superposition and entanglement."


def _docs(texts):
    return [Document(name=f"doc_{i}.txt", content=t, size=len(t)) for i, t in enumerate(texts)]


def _assert_size_additive(node):
    if node.children is None:
        return
    assert node.size == sum(child.size for child in node.children)
    for child in node.children:
        _assert_size_additive(child)


def _two_group_vectors(n_a, n_b, extra_dims=0):
    """Group A on e0, group B at cosine 0.2 from A."""
    dim = 2 + extra_dims
    a = np.zeros(dim)
    a[0] = 1.0
    b = np.zeros(dim)
    b[0], b[1] = 0.2, math.sqrt(0.96)
    return [a] * n_a + [b] * n_b


def test_empty_corpus_returns_none():
    assert HierarchyBuilder().build([], [], np.zeros((0, 0))) is None


def test_root_with_clusters_and_outliers():
    docs = _docs([NEURAL, NEURAL, QUANTUM, QUANTUM, "Legal rules apply here for this contract."])
    vectors = np.array([[1, 0, 0], [1, 0, 0], [0, 1, 0], [0, 1, 0], [0, 0, 1]], dtype=float)
    root = HierarchyBuilder().build(docs, [0, 0, 1, 1, -1], vectors)

    assert root.id == "root"
    assert root.name == "Document Collection"
    assert root.level == 0
    assert [c.id for c in root.children] == ["cluster_0", "cluster_1", "outlier_4"]

    outlier = root.children[2]
    assert outlier.is_leaf
    assert outlier.level == 1
    assert outlier.name == "doc_4"
    assert outlier.topic_info.color == DEFAULT_LEXICON.outlier_color
    assert outlier.topic_info.confidence == 0.0

    cluster = root.children[0]
    assert [c.id for c in cluster.children] == ["cluster_0_doc_0", "cluster_0_doc_1"]
    assert all(c.level == 2 and c.is_leaf for c in cluster.children)
    assert cluster.topic_info.average_confidence == pytest.approx(1.0)

    assert root.topic_summary["total_topics"] == 2
    assert root.topic_summary["total_documents"] == 5
    assert len(root.topic_summary["top_topics"]) == 2
    _assert_size_additive(root)
    assert root.size == sum(len(d.content) for d in docs)


def test_every_document_in_exactly_one_leaf():
    docs = _docs([NEURAL, QUANTUM, NEURAL, "Legal rules apply here.", QUANTUM])
    vectors = np.array([[1, 0, 0], [0, 1, 0], [1, 0, 0], [0, 0, 1], [0, 1, 0]], dtype=float)
    root = HierarchyBuilder().build(docs, [0, 1, 0, -1, 1], vectors)
    leaf_docs = [leaf.documents[0].name for leaf in iter_leaves(root)]
    assert sorted(leaf_docs) == sorted(d.name for d in docs)
    assert len(set(leaf_docs)) == len(docs)


def test_single_document_root_is_its_leaf():
    docs = _docs([NEURAL])
    root = HierarchyBuilder().build(docs, [-1], np.zeros((1, 0)))
    assert root.id == "outlier_0"
    assert root.is_leaf
    assert root.children is None
    assert root.level == 0


def test_large_cluster_is_subdivided():
    docs = _docs([NEURAL] * 10 + [QUANTUM] * 10)
    vectors = np.array(_two_group_vectors(10, 10))
    root = HierarchyBuilder().build(docs, [0] * 20, vectors)

    # single top-level cluster is promoted to root
    assert root.id == "cluster_0"
    assert root.level == 0
    assert len(root.children) == 2
    for k, sub in enumerate(root.children):
        assert sub.id == f"cluster_0_sub_{k}"
        assert sub.level == 1
        assert not sub.is_leaf
        assert len(sub.children) == 10
        assert all(leaf.is_leaf and leaf.level == 2 for leaf in sub.children)
    assert root.children[0].children[3].id == "cluster_0_sub_0_doc_3"
    assert root.children[1].children[0].id == "cluster_0_sub_1_doc_10"
    assert len(list(iter_leaves(root))) == 20
    _assert_size_additive(root)


def test_subdivision_noise_becomes_direct_leaves():
    docs = _docs([NEURAL] * 5 + [QUANTUM] * 5 + ["Legal rules apply here.", "Odd bits and pieces."])
    vectors = _two_group_vectors(5, 5, extra_dims=2)
    e2 = np.array([0.0, 0.0, 1.0, 0.0])
    e3 = np.array([0.0, 0.0, 0.0, 1.0])
    vectors = np.array(vectors + [e2, e3])
    root = HierarchyBuilder().build(docs, [0] * 12, vectors)

    assert [c.id for c in root.children] == [
        "cluster_0_sub_0",
        "cluster_0_sub_1",
        "cluster_0_doc_10",
        "cluster_0_doc_11",
    ]
    assert root.children[2].is_leaf and root.children[3].is_leaf
    assert len(list(iter_leaves(root))) == 12
    _assert_size_additive(root)


def test_inseparable_large_cluster_is_halved():
    docs = _docs([NEURAL] * 9)
    root = HierarchyBuilder().build(docs, [0] * 9, np.ones((9, 3)))

    assert root.id == "cluster_0"
    assert [c.id for c in root.children] == ["cluster_0_sub_0", "cluster_0_sub_1"]
    part_a, part_b = root.children
    assert part_a.name == f"{root.name} (Part A)"
    assert part_b.name == f"{root.name} (Part B)"
    assert [d.name for d in part_a.documents] == [f"doc_{i}.txt" for i in range(4)]
    assert part_b.n_documents == 5
    assert part_a.level == 1 and part_b.level == 1
    assert part_b.children[0].id == "cluster_0_sub_1_doc_4"
    assert all(leaf.level == 2 for leaf in iter_leaves(root))
    assert len(list(iter_leaves(root))) == 9
    _assert_size_additive(root)


def test_midpoint_split_can_be_disabled():
    docs = _docs([NEURAL] * 9)
    config = ClusteringConfig(midpoint_split=False)
    root = HierarchyBuilder(config=config).build(docs, [0] * 9, np.ones((9, 3)))
    assert len(root.children) == 9
    assert all(child.is_leaf for child in root.children)


def test_max_depth_stops_subdivision():
    docs = _docs([NEURAL] * 10 + [QUANTUM] * 10)
    vectors = np.array(_two_group_vectors(10, 10))
    root = HierarchyBuilder(config=ClusteringConfig(max_depth=2)).build(docs, [0] * 20, vectors)
    assert len(root.children) == 20
    assert all(child.is_leaf for child in root.children)


def test_small_cluster_is_not_subdivided():
    docs = _docs([NEURAL] * 4 + [QUANTUM] * 4)
    vectors = np.array(_two_group_vectors(4, 4))
    root = HierarchyBuilder().build(docs, [0] * 8, vectors)
    assert all(child.is_leaf for child in root.children)


def test_misaligned_inputs_raise():
    docs = _docs([NEURAL, QUANTUM])
    with pytest.raises(ValueError):
        HierarchyBuilder().build(docs, [0], np.zeros((2, 2)))
    with pytest.raises(ValueError):
        HierarchyBuilder().build(docs, [0, 0], np.zeros((3, 2)))


def test_to_dict_is_json_ready():
    docs = _docs([NEURAL, NEURAL, QUANTUM])
    vectors = np.array([[1, 0], [1, 0], [0, 1]], dtype=float)
    root = HierarchyBuilder().build(docs, [0, 0, -1], vectors)
    payload = root.to_dict()
    json.dumps(payload)
    assert payload["id"] == "root"
    assert payload["children"][0]["documents"] == ["doc_0.txt", "doc_1.txt"]
    assert payload["children"][1]["children"] is None


def test_hierarchy_frame():
    docs = _docs([NEURAL, NEURAL, QUANTUM])
    vectors = np.array([[1, 0], [1, 0], [0, 1]], dtype=float)
    root = HierarchyBuilder().build(docs, [0, 0, -1], vectors)
    frame = hierarchy_frame(root)
    assert list(frame.columns) == ["id", "parent_id", "name", "level", "size", "n_documents", "is_leaf"]
    assert len(frame) == 5
    assert frame.iloc[0]["id"] == "root"
    assert frame.iloc[0]["parent_id"] is None
    assert frame.loc[0, "parent_id"] is None
    assert frame["parent_id"].dtype == object
    assert frame["parent_id"].tolist()[1:] == ["root", "cluster_0", "cluster_0", "root"]
    assert frame["is_leaf"].sum() == 3
    assert hierarchy_frame(None).empty
    assert list(iter_leaves(None)) == []
