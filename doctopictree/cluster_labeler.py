"""
cluster_labeler.py

Topic labels and confidence scores for density clusters.

- Clusters are named from their most *distinctive* words, using a
  class-based TF-IDF (C-TF-IDF) contrast of the cluster's text against the
  text of every other cluster:

      score(w) = (f_c(w) / |C|) / (f_o(w) / |O| + ε) * f_c(w)

  where f_c / f_o are in-cluster / out-of-cluster counts and |C| / |O| the
  token totals. The trailing raw-frequency factor keeps rare one-off words
  from dominating.
- Outlier documents (cluster -1) skip C-TF-IDF and get an individual label
  from an ordered fallback chain (document type → keyword pair / single
  keyword → domain category → length bucket → long word → generic).
- Confidence of a document = mean cosine similarity (clamped to [0, 1]) to
  the other members of its cluster.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from ._logging import LoggingMixin
from .config import ClusteringConfig
from .documents import Document
from .lexicon import Lexicon
from .term_extractor import KeywordScore, TermExtractor


@dataclass
class DistinctiveTerm:
    word: str
    score: float
    cluster_freq: int
    other_freq: int


@dataclass
class ClusterLabel:
    cluster_id: int
    label: str
    keywords: List[DistinctiveTerm]


@dataclass
class TopicInfo:
    """
    Topic metadata attached to a ClusterNode.

    Attributes
    ----------
    label:
        Human-readable topic name.
    keywords:
        Scored document keywords of the topic text.
    representative_terms:
        Top 3 keyword strings.
    description:
        One-line description, e.g. ``"3 documents about a, b, c"``.
    confidence:
        Document confidence for leaves; average confidence for clusters.
    color:
        Display colour from the lexicon palette.
    """

    label: str
    keywords: List[KeywordScore] = field(default_factory=list)
    representative_terms: List[str] = field(default_factory=list)
    description: str = ""
    confidence: float = 0.0
    color: Optional[str] = None
    cluster_id: Optional[int] = None
    document_count: int = 0
    average_confidence: Optional[float] = None


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


class ClusterLabeler(LoggingMixin):
    def __init__(
        self,
        term_extractor: Optional[TermExtractor] = None,
        *,
        config: Optional[ClusteringConfig] = None,
        lexicon: Optional[Lexicon] = None,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or ClusteringConfig()
        self.term_extractor = term_extractor or TermExtractor(lexicon=lexicon, config=self.config)
        self.lexicon = lexicon or self.term_extractor.lexicon
        self.logger = logger

    # ------------------------------------------------------------------
    # C-TF-IDF cluster labels
    # ------------------------------------------------------------------

    def distinctive_terms(
        self,
        cluster_texts: Sequence[str],
        other_texts: Sequence[str],
    ) -> List[DistinctiveTerm]:
        """
        Rank words of ``cluster_texts`` by distinctiveness against
        ``other_texts`` and return the top ``config.ctfidf_top_n``.
        """
        cluster_words = self.term_extractor.label_tokens(" ".join(cluster_texts))
        other_words = self.term_extractor.label_tokens(" ".join(other_texts))
        cluster_freq = Counter(cluster_words)
        other_freq = Counter(other_words)
        cluster_size = len(cluster_words)
        other_size = len(other_words)
        eps = self.config.ctfidf_epsilon

        scored: List[DistinctiveTerm] = []
        for word, count in cluster_freq.items():
            other_count = other_freq.get(word, 0)
            cluster_tf = count / cluster_size
            other_tf = other_count / other_size if other_size else 0.0
            distinctiveness = cluster_tf / (other_tf + eps)
            scored.append(
                DistinctiveTerm(
                    word=word,
                    score=distinctiveness * count,
                    cluster_freq=count,
                    other_freq=other_count,
                )
            )

        scored.sort(key=lambda t: t.score, reverse=True)
        return scored[: self.config.ctfidf_top_n]

    def label_cluster(
        self,
        cluster_id: int,
        member_texts: Sequence[str],
        other_texts: Sequence[str],
    ) -> ClusterLabel:
        """
        Name one cluster.

        - 2+ distinctive terms → ``"{Term1} & {Term2} Cluster"`` (or a
          content-matched suffix such as "Methods" / "Systems" when
          ``config.content_label_suffix`` is on);
        - 1 term → ``"{Term} Research"``;
        - none → ``"Topic {cluster_id}"``.
        """
        keywords = self.distinctive_terms(member_texts, other_texts)
        if len(keywords) >= 2:
            first, second = (_capitalize(k.word) for k in keywords[:2])
            suffix = "Cluster"
            if self.config.content_label_suffix:
                suffix = self._pair_suffix(" ".join(member_texts).lower())
            label = f"{first} & {second} {suffix}"
        elif len(keywords) == 1:
            label = f"{_capitalize(keywords[0].word)} Research"
        else:
            label = f"Topic {cluster_id}"
        return ClusterLabel(cluster_id=cluster_id, label=label, keywords=keywords)

    def label_clusters(
        self,
        texts: Sequence[str],
        assignments: Sequence[int],
        *,
        verbose: bool = False,
    ) -> Dict[int, ClusterLabel]:
        """
        Label every non-noise cluster against all other clusters.

        Outlier texts (assignment -1) take part in neither side of the
        contrast.
        """
        if len(texts) != len(assignments):
            raise ValueError(
                f"texts ({len(texts)}) and assignments ({len(assignments)}) must have the same length."
            )
        by_cluster: Dict[int, List[str]] = {}
        for text, cid in zip(texts, assignments):
            if int(cid) != -1:
                by_cluster.setdefault(int(cid), []).append(text)

        labels: Dict[int, ClusterLabel] = {}
        for cid in sorted(by_cluster):
            others = [t for other, ts in by_cluster.items() if other != cid for t in ts]
            labels[cid] = self.label_cluster(cid, by_cluster[cid], others)
            self._log(
                f"[ClusterLabeler] Cluster {cid}: '{labels[cid].label}' "
                f"({len(by_cluster[cid])} document(s)).",
                verbose,
            )
        return labels

    def _pair_suffix(self, content: str) -> str:
        for suffix, cues in self.lexicon.pair_label_suffixes:
            if any(cue in content for cue in cues):
                return suffix
        return self.lexicon.pair_label_default_suffix

    def _single_suffix(self, content: str) -> str:
        for suffix, cues in self.lexicon.single_label_suffixes:
            if any(cue in content for cue in cues):
                return suffix
        return self.lexicon.single_label_default_suffix

    # ------------------------------------------------------------------
    # Outlier labels
    # ------------------------------------------------------------------

    def label_outlier(self, text: str) -> str:
        """
        Individual label for a noise document. Rules are tried in order and
        the first one that matches wins:

        1. document-type phrase ("Tutorial", "Case Study", ...), prefixed
           with the top meaningful keyword when there is one;
        2. two meaningful keywords → ``"{K1} & {K2} {Methods|Systems|...}"``,
           one keyword → ``"{K} {Research|Development|...}"``;
        3. domain category ("Business Document", "Legal Document", ...);
        4. length bucket ("Brief Document" / "Comprehensive Document");
        5. ``"{First long word} Document"``;
        6. ``"Specialized Document"``.
        """
        content = text.lower()
        meaningful = [
            _capitalize(k.word)
            for k in self.term_extractor.extract_document_keywords(text)
            if len(k.word) > 4 and k.score > 1
        ][:3]

        for doc_type, patterns in self.lexicon.document_type_patterns:
            if any(p in content for p in patterns):
                return f"{meaningful[0]} {doc_type}" if meaningful else doc_type

        if len(meaningful) >= 2:
            return f"{meaningful[0]} & {meaningful[1]} {self._pair_suffix(content)}"
        if len(meaningful) == 1:
            return f"{meaningful[0]} {self._single_suffix(content)}"

        for category, cues in self.lexicon.domain_categories:
            if any(cue in content for cue in cues):
                return category

        word_count = len(text.split())
        if word_count < self.config.brief_word_limit:
            return "Brief Document"
        if word_count > self.config.comprehensive_word_limit:
            return "Comprehensive Document"

        stopwords = self.lexicon.stopwords
        for raw in content.split():
            if len(raw) <= 6 or raw in stopwords:
                continue
            word = "".join(ch for ch in raw if ch.isalnum())
            if len(word) > 6:
                return f"{_capitalize(word)} Document"

        return "Specialized Document"

    # ------------------------------------------------------------------
    # Topic metadata
    # ------------------------------------------------------------------

    def describe(self, keywords: Sequence[KeywordScore], document_count: int) -> str:
        if not keywords:
            return f"Collection of {document_count} documents"
        top = ", ".join(k.word for k in keywords[:3])
        return f"{document_count} documents about {top}"

    def cluster_topic_info(
        self,
        cluster_id: int,
        documents: Sequence[Document],
        label: str,
        confidences: Sequence[float],
    ) -> TopicInfo:
        """TopicInfo for a (sub-)cluster of ``documents``."""
        keywords = self.term_extractor.extract_document_keywords(
            " ".join(doc.label_text for doc in documents)
        )
        average = float(np.mean(confidences)) if len(confidences) else 0.0
        colors = self.lexicon.topic_colors
        return TopicInfo(
            label=label,
            keywords=keywords,
            representative_terms=[k.word for k in keywords[:3]],
            description=self.describe(keywords, len(documents)),
            confidence=round(average, 2),
            color=colors[cluster_id % len(colors)] if colors and cluster_id >= 0 else None,
            cluster_id=cluster_id,
            document_count=len(documents),
            average_confidence=average,
        )

    def outlier_topic_info(self, document: Document) -> TopicInfo:
        keywords = self.term_extractor.extract_document_keywords(document.content)
        return TopicInfo(
            label=self.label_outlier(document.content),
            keywords=keywords,
            representative_terms=[k.word for k in keywords[:3]],
            description=self.describe(keywords, 1),
            confidence=0.0,
            color=self.lexicon.outlier_color,
            cluster_id=-1,
            document_count=1,
            average_confidence=0.0,
        )

    # ------------------------------------------------------------------
    # Confidence
    # ------------------------------------------------------------------

    @staticmethod
    def confidence_scores(vectors: np.ndarray, assignments: Sequence[int]) -> np.ndarray:
        """
        Per-document confidence in its cluster assignment.

        - outliers (-1) → 0.0
        - members of singleton clusters → 1.0
        - otherwise the mean of clamp(cos(v_i, v_j), 0, 1) over the other
          members j, rounded to 2 decimals.
        """
        labels = np.asarray(assignments, dtype=int)
        X = np.asarray(vectors, dtype=np.float64)
        if X.shape[0] != labels.shape[0]:
            raise ValueError(
                f"vectors ({X.shape[0]} rows) and assignments ({labels.shape[0]}) must align."
            )
        scores = np.zeros(labels.shape[0], dtype=np.float64)
        if labels.size == 0:
            return scores

        if X.ndim == 2 and X.shape[1] > 0:
            sims = np.clip(cosine_similarity(X), 0.0, 1.0)
        else:
            sims = np.zeros((labels.shape[0], labels.shape[0]))

        for cid in np.unique(labels):
            if cid == -1:
                continue
            members = np.flatnonzero(labels == cid)
            if members.size == 1:
                scores[members[0]] = 1.0
                continue
            block = sims[np.ix_(members, members)]
            totals = block.sum(axis=1) - np.diag(block)
            scores[members] = np.round(totals / (members.size - 1), 2)
        return scores
