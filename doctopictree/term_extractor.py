"""
term_extractor.py

Heuristic, model-free term extraction for document clustering.

Main features
-------------
- "High-value" unigram filter: suffix patterns (-tion, -ment, -ology, ...)
  or a domain-keyword whitelist, at least one vowel, no digits, and no run
  of 3+ identical characters.
- Bigrams built from adjacent qualifying tokens (distinct words, each at
  least ``bigram_min_token_length`` characters long).
- A separate keyword scorer (``extract_document_keywords``) used for
  per-document and per-cluster labels, independent of the clustering terms.

Quick usage
-----------
    from doctopictree import TextPreprocessor, TermExtractor

    extractor = TermExtractor(TextPreprocessor())
    terms = extractor.extract_terms("Neural network optimization for ...")
    if not terms:
        ...  # drop the document, it carries no meaningful content
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import ClusteringConfig
from .lexicon import DEFAULT_LEXICON, Lexicon
from .text_preprocessor import TextPreprocessor


@dataclass
class KeywordScore:
    word: str
    score: float
    frequency: int


class TermExtractor:
    """
    Unigram/bigram term extraction plus keyword scoring.

    The extractor is stateless apart from its injected tables, so one
    instance can be shared across a whole corpus.
    """

    def __init__(
        self,
        preprocessor: Optional[TextPreprocessor] = None,
        *,
        lexicon: Optional[Lexicon] = None,
        config: Optional[ClusteringConfig] = None,
    ) -> None:
        self.config = config or ClusteringConfig()
        self.lexicon = lexicon or (preprocessor.lexicon if preprocessor else DEFAULT_LEXICON)
        self.preprocessor = preprocessor or TextPreprocessor(
            lexicon=self.lexicon,
            min_token_length=self.config.min_token_length,
        )

        self._suffix_re = re.compile(self.lexicon.high_value_suffix_pattern)
        self._vowel_re = re.compile(r"[aeiouy]")
        self._digit_re = re.compile(r"\d")
        self._repeat_re = re.compile(r"(.)\1\1")
        self._keyword_split_re = re.compile(r"[^\w\s]|_")

    # ------------------------------------------------------------------
    # Clustering terms
    # ------------------------------------------------------------------

    def extract_terms(self, text: str) -> Dict[str, int]:
        """
        Extract weighted unigram and bigram terms from raw text.

        Returns
        -------
        dict
            Term → frequency. An empty dict means the document has no
            meaningful content and should be dropped from the corpus.
        """
        tokens = self.preprocessor.tokenize(text)
        counts: Counter = Counter()

        previous: Optional[str] = None
        for tok in tokens:
            if not self.is_high_value(tok):
                previous = None
                continue
            counts[tok] += 1
            if previous is not None and self._is_plausible_bigram(previous, tok):
                counts[f"{previous} {tok}"] += 1
            previous = tok

        return dict(counts)

    def is_high_value(self, token: str) -> bool:
        """Return True if ``token`` passes the high-value term filter."""
        if not token or token in self.lexicon.stopwords:
            return False
        if len(token) < self.preprocessor.min_token_length:
            return False
        if self._digit_re.search(token):
            return False
        if not self._vowel_re.search(token):
            return False
        if self._repeat_re.search(token):
            return False
        return self._in_domain(token) or bool(self._suffix_re.search(token))

    def _in_domain(self, token: str) -> bool:
        domain = self.lexicon.domain_keywords
        if token in domain:
            return True
        # naive plural folding: networks -> network, theories -> theory
        if token.endswith("ies") and token[:-3] + "y" in domain:
            return True
        return token.endswith("s") and token[:-1] in domain

    def _is_plausible_bigram(self, first: str, second: str) -> bool:
        min_len = self.config.bigram_min_token_length
        return first != second and len(first) >= min_len and len(second) >= min_len

    # ------------------------------------------------------------------
    # Labeling keywords
    # ------------------------------------------------------------------

    def label_tokens(self, text: str) -> List[str]:
        """
        Lightweight tokenisation shared by keyword scoring and C-TF-IDF:
        lowercase, punctuation to spaces, keep words longer than 3 chars
        that are not stopwords.
        """
        words = self._keyword_split_re.sub(" ", text.lower()).split()
        stopwords = self.lexicon.stopwords
        return [w for w in words if len(w) > 3 and w not in stopwords]

    def extract_document_keywords(self, text: str, top_n: Optional[int] = None) -> List[KeywordScore]:
        """
        Score words for labeling.

        score = frequency
                × technical_boost   if the word contains a technical term
                × generic_penalty   if it contains a generic academic term
                × long_word_bonus   if longer than ``long_word_length``
                × medium_word_bonus if longer than ``medium_word_length``

        Returns the ``top_n`` (default ``config.keyword_top_n``) words by
        score; ties keep first-appearance order.
        """
        cfg = self.config
        limit = cfg.keyword_top_n if top_n is None else top_n
        freq = Counter(self.label_tokens(text))

        scored: List[KeywordScore] = []
        for word, count in freq.items():
            score = float(count)
            if any(term in word for term in self.lexicon.technical_terms):
                score *= cfg.technical_boost
            if any(term in word for term in self.lexicon.generic_terms):
                score *= cfg.generic_penalty
            if len(word) > cfg.long_word_length:
                score *= cfg.long_word_bonus
            if len(word) > cfg.medium_word_length:
                score *= cfg.medium_word_bonus
            scored.append(KeywordScore(word=word, score=score, frequency=count))

        scored.sort(key=lambda k: k.score, reverse=True)
        return scored[:limit]
