"""Tests for term extraction and keyword scoring."""

import pytest

from doctopictree import ClusteringConfig, TermExtractor


def test_extract_terms_unigrams_and_bigrams():
    terms = TermExtractor().extract_terms("Neural networks improve classification performance.")
    assert terms == {
        "neural": 1,
        "networks": 1,
        "neural networks": 1,
        "classification": 1,
        "performance": 1,
        "classification performance": 1,
    }


def test_no_meaningful_terms_gives_empty_map():
    assert TermExtractor().extract_terms("the cat sat on a mat") == {}
    assert TermExtractor().extract_terms("") == {}


def test_non_qualifying_token_breaks_bigram():
    terms = TermExtractor().extract_terms("neural improve networks")
    assert "neural networks" not in terms
    assert terms == {"neural": 1, "networks": 1}


def test_repeated_word_is_not_a_bigram():
    terms = TermExtractor().extract_terms("learning learning")
    assert terms == {"learning": 2}


@pytest.mark.parametrize(
    "token, expected",
    [
        ("classification", True),   # suffix
        ("quantum", True),          # domain keyword
        ("networks", True),         # plural of a domain keyword
        ("theories", True),         # -ies plural of a domain keyword
        ("during", False),          # stopword
        ("processsing", False),     # 3+ repeated characters
        ("version2tion", False),    # digit
        ("cat", False),             # neither suffix nor domain
    ],
)
def test_is_high_value(token, expected):
    assert TermExtractor().is_high_value(token) is expected


def test_label_tokens():
    assert TermExtractor().label_tokens("Data-driven, AI!") == ["data", "driven"]


def test_extract_document_keywords_scoring():
    keywords = TermExtractor().extract_document_keywords("optimization optimization research")
    assert [k.word for k in keywords] == ["optimization", "research"]
    # 2 x technical 3.0 x long 1.5 x medium 1.2
    assert keywords[0].score == pytest.approx(10.8)
    assert keywords[0].frequency == 2
    # 1 x generic 0.3 x medium 1.2
    assert keywords[1].score == pytest.approx(0.36)


def test_extract_document_keywords_top_n():
    text = "alpha bravo charlie delta echo foxtrot golf hotel india juliet kilo lima mike november"
    extractor = TermExtractor()
    assert len(extractor.extract_document_keywords(text)) == 12
    assert len(extractor.extract_document_keywords(text, top_n=3)) == 3
    small = TermExtractor(config=ClusteringConfig(keyword_top_n=5))
    assert len(small.extract_document_keywords(text)) == 5


def test_label_tokens_split_like_clustering_tokens():
    extractor = TermExtractor()
    text = "Naïve_Bayes classifiers"
    assert extractor.label_tokens(text) == ["naïve", "bayes", "classifiers"]
    assert extractor.preprocessor.tokenize(text) == ["naïve", "bayes", "classifiers"]
