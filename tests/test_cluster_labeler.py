"""Tests for C-TF-IDF labels, outlier labels and confidence scores."""

import numpy as np
import pytest

from doctopictree import ClusterLabeler, ClusteringConfig, DEFAULT_LEXICON, Document


def test_distinctive_terms_scores():
    terms = ClusterLabeler().distinctive_terms(
        ["neural networks neural learning"], ["quantum computing qubits"]
    )
    assert [t.word for t in terms] == ["neural", "networks", "learning"]
    # (2/4) / (0 + 0.01) * 2
    assert terms[0].score == pytest.approx(100.0)
    assert terms[0].cluster_freq == 2
    assert terms[0].other_freq == 0


def test_shared_words_are_less_distinctive():
    terms = ClusterLabeler().distinctive_terms(
        ["neural networks neural"], ["neural quantum computing"]
    )
    assert terms[0].word == "networks"


def test_top_candidates_are_capped():
    text = "alpha bravo charlie delta echo foxtrot golf hotel india juliet"
    assert len(ClusterLabeler().distinctive_terms([text], [])) == 8


def test_label_cluster_two_terms():
    label = ClusterLabeler().label_cluster(0, ["neural networks neural learning"], ["quantum computing"])
    assert label.label == "Neural & Networks Cluster"
    assert label.cluster_id == 0


def test_label_cluster_content_suffix():
    labeler = ClusterLabeler(config=ClusteringConfig(content_label_suffix=True))
    label = labeler.label_cluster(0, ["sorting algorithm sorting heaps"], ["quantum computing"])
    assert label.label == "Sorting & Algorithm Methods"


def test_label_cluster_single_term_and_fallback():
    labeler = ClusterLabeler()
    assert labeler.label_cluster(1, ["neural"], []).label == "Neural Research"
    assert labeler.label_cluster(3, ["the and of"], []).label == "Topic 3"


def test_label_clusters_ignores_outliers():
    labeler = ClusterLabeler()
    labels = labeler.label_clusters(
        ["neural networks", "neural learning", "quantum qubits", "random outlier"],
        [1, 1, 0, -1],
    )
    assert list(labels) == [0, 1]
    assert labels[1].keywords[0].word == "neural"
    assert all(k.word != "random" for k in labels[0].keywords + labels[1].keywords)
    with pytest.raises(ValueError):
        labeler.label_clusters(["a"], [0, 1])


def test_outlier_document_type_beats_domain_category():
    label = ClusterLabeler().label_outlier("This tutorial explains enterprise business strategy.")
    assert label == "Enterprise Tutorial"
    assert label != "Business Document"


def test_outlier_keyword_pair():
    label = ClusterLabeler().label_outlier(
        "Blockchain consensus mechanisms secure distributed ledgers across peer nodes."
    )
    assert label == "Distributed & Blockchain Study"


def test_outlier_single_keyword():
    assert ClusterLabeler().label_outlier("Quantum stuff here.") == "Quantum Study"


def test_outlier_domain_category():
    assert ClusterLabeler().label_outlier("Legal rules apply here.") == "Legal Document"


def test_outlier_length_buckets():
    text = "Short note with small words only."
    assert ClusterLabeler().label_outlier(text) == "Brief Document"
    labeler = ClusterLabeler(config=ClusteringConfig(brief_word_limit=0, comprehensive_word_limit=3))
    assert labeler.label_outlier(text) == "Comprehensive Document"


def test_outlier_long_word_and_final_fallback():
    labeler = ClusterLabeler(config=ClusteringConfig(brief_word_limit=0, comprehensive_word_limit=10**6))
    assert labeler.label_outlier("Research notes.") == "Research Document"
    assert labeler.label_outlier("Odd bits.") == "Specialized Document"


def test_confidence_scores():
    vectors = np.array([[1.0, 0.0], [0.8, 0.6], [0.0, 1.0], [1.0, 0.0]])
    scores = ClusterLabeler.confidence_scores(vectors, [0, 0, -1, 1])
    assert scores.tolist() == [0.8, 0.8, 0.0, 1.0]


def test_confidence_is_clamped_at_zero():
    scores = ClusterLabeler.confidence_scores(np.array([[1.0, 0.0], [-1.0, 0.0]]), [0, 0])
    assert scores.tolist() == [0.0, 0.0]


def test_confidence_validation_and_empty():
    with pytest.raises(ValueError):
        ClusterLabeler.confidence_scores(np.ones((2, 2)), [0])
    assert ClusterLabeler.confidence_scores(np.zeros((0, 3)), []).tolist() == []


def test_topic_info():
    labeler = ClusterLabeler()
    docs = [
        Document(name="a.txt", content="neural networks neural networks", size=31),
        Document(name="b.txt", content="neural learning", size=15),
    ]
    info = labeler.cluster_topic_info(9, docs, "Neural Cluster", [0.5, 0.7])
    assert info.label == "Neural Cluster"
    assert info.color == DEFAULT_LEXICON.topic_colors[1]
    assert info.document_count == 2
    assert info.average_confidence == pytest.approx(0.6)
    assert info.representative_terms[0] == "neural"
    assert info.description.startswith("2 documents about neural")

    outlier = labeler.outlier_topic_info(Document(name="c.txt", content="Legal rules apply here.", size=23))
    assert outlier.color == DEFAULT_LEXICON.outlier_color
    assert outlier.confidence == 0.0
    assert outlier.label == "Legal Document"


def test_describe_without_keywords():
    assert ClusterLabeler().describe([], 4) == "Collection of 4 documents"
