"""
vector_space.py

Document vectors for density clustering.

Two branches share one contract (every vector has the vocabulary's length,
so distances are well defined across the corpus):

- **TF-IDF** (:meth:`VectorSpaceBuilder.build_vectors`): corpus vocabulary
  chosen by document-frequency window, TF = count / total terms,
  IDF = ln(N / df), L2-normalised. Clustered with cosine similarity.
- **Lightweight embeddings** (:meth:`VectorSpaceBuilder.build_embeddings`):
  vocabulary taken directly from summary words, position-weighted term
  frequency plus a small co-occurrence boost, L2-normalised. Projected to
  2D with :class:`DimensionalityReducer` and clustered with Euclidean eps.

Zero-magnitude rows are kept as zero vectors (degenerate documents); they
have similarity 0 with everything and usually end up as outliers.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from sklearn.preprocessing import normalize

from ._logging import LoggingMixin
from .config import ClusteringConfig
from .lexicon import DEFAULT_LEXICON, Lexicon


_PUNCT_RE = re.compile(r"[^\w\s]|_")


@dataclass
class VectorSpace:
    """
    Attributes
    ----------
    vocabulary:
        Ordered terms; column ``j`` of ``vectors`` belongs to ``vocabulary[j]``.
    vectors:
        Array of shape (n_documents, len(vocabulary)), rows L2-normalised
        (or all-zero).
    document_frequency:
        Term → number of documents containing it, for vocabulary terms.
    mode:
        ``"tfidf"`` or ``"embedding"``.
    relaxed_window:
        True when the TF-IDF vocabulary ignored the upper document-frequency
        bound (see :meth:`VectorSpaceBuilder.build_vocabulary`).
    """

    vocabulary: List[str]
    vectors: np.ndarray
    document_frequency: Dict[str, int]
    mode: str
    relaxed_window: bool = False

    @property
    def n_documents(self) -> int:
        return int(self.vectors.shape[0])

    def zero_rows(self) -> List[int]:
        """Indices of degenerate (all-zero) document vectors."""
        norms = np.linalg.norm(self.vectors, axis=1) if self.vectors.size else np.zeros(self.n_documents)
        return [int(i) for i in np.flatnonzero(norms == 0.0)]


class VectorSpaceBuilder(LoggingMixin):
    def __init__(
        self,
        config: Optional[ClusteringConfig] = None,
        *,
        lexicon: Optional[Lexicon] = None,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or ClusteringConfig()
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.logger = logger

    # ------------------------------------------------------------------
    # TF-IDF branch
    # ------------------------------------------------------------------

    def build_vocabulary(self, term_counts: Sequence[Mapping[str, int]]) -> Dict[str, int]:
        """
        Select vocabulary terms by document frequency.

        Keeps terms whose document frequency lies in the inclusive window
        ``config.document_frequency_bounds(N)``, sorted by document
        frequency (descending, ties in first-appearance order) and truncated
        to ``config.max_vocab_size``.

        If the window would leave every document of a multi-document corpus
        with a zero vector (near-duplicate corpora, where all shared terms
        exceed the upper bound), the upper bound is dropped and
        :meth:`build_vectors` switches to a smoothed IDF.

        Returns
        -------
        dict
            Ordered mapping term → document frequency.
        """
        return self._select_vocabulary(term_counts)[0]

    def _select_vocabulary(
        self, term_counts: Sequence[Mapping[str, int]]
    ) -> Tuple[Dict[str, int], bool]:
        n_docs = len(term_counts)
        df: Counter = Counter()
        for counts in term_counts:
            df.update(term for term, c in counts.items() if c > 0)

        low, high = self.config.document_frequency_bounds(n_docs)
        candidates = [(term, d) for term, d in df.items() if low <= d <= high]
        relaxed = False
        # ln(N / df) is 0 for df == N, so only rarer terms yield non-zero rows
        if self.config.relax_df_window and n_docs > 1 and not any(d < n_docs for _, d in candidates):
            candidates = [(term, d) for term, d in df.items() if d >= low]
            relaxed = bool(candidates)
        # Counter preserves first-seen order, sorted() is stable
        candidates.sort(key=lambda item: item[1], reverse=True)
        return dict(candidates[: self.config.max_vocab_size]), relaxed

    def build_vectors(
        self,
        term_counts: Sequence[Mapping[str, int]],
        *,
        verbose: bool = False,
    ) -> VectorSpace:
        """Build L2-normalised TF-IDF vectors over a shared vocabulary."""
        n_docs = len(term_counts)
        vocab_df, relaxed = self._select_vocabulary(term_counts)
        vocabulary = list(vocab_df.keys())
        index = {term: j for j, term in enumerate(vocabulary)}

        matrix = np.zeros((n_docs, len(vocabulary)), dtype=np.float64)
        for i, counts in enumerate(term_counts):
            total = sum(counts.values())
            if total <= 0:
                continue
            for term, count in counts.items():
                j = index.get(term)
                if j is None:
                    continue
                tf = count / total
                if relaxed:
                    # smoothed, as in sklearn TfidfVectorizer(smooth_idf=True)
                    idf = math.log((1 + n_docs) / (1 + vocab_df[term])) + 1.0
                else:
                    idf = math.log(n_docs / vocab_df[term])
                matrix[i, j] = tf * idf

        vectors = self._l2_normalize(matrix)
        space = VectorSpace(
            vocabulary=vocabulary,
            vectors=vectors,
            document_frequency=vocab_df,
            mode="tfidf",
            relaxed_window=relaxed,
        )
        if relaxed:
            self._log(
                "[VectorSpaceBuilder] No term inside the document-frequency window; "
                "kept corpus-wide terms with smoothed IDF.",
                verbose,
            )
        self._log(
            f"[VectorSpaceBuilder] TF-IDF space: {n_docs} documents × {len(vocabulary)} terms "
            f"({len(space.zero_rows())} zero vector(s)).",
            verbose,
        )
        return space

    # ------------------------------------------------------------------
    # Lightweight embedding branch
    # ------------------------------------------------------------------

    def embedding_tokens(self, text: str) -> List[str]:
        words = _PUNCT_RE.sub(" ", text.lower()).split()
        stopwords = self.lexicon.stopwords
        return [w for w in words if len(w) > 3 and w not in stopwords]

    def build_embeddings(self, texts: Sequence[str], *, verbose: bool = False) -> VectorSpace:
        """
        Lightweight sentence embeddings over summary texts.

        - vocabulary: words (len > 3, not stopwords) in first-seen order,
          capped at ``config.embedding_max_vocab_size``;
        - component += (1 / n_words) × position weight (first/last word
          weighted by ``config.position_weight``);
        - each adjacent in-vocabulary word pair adds
          ``config.cooccurrence_boost`` to both of its slots;
        - rows are L2-normalised.
        """
        cfg = self.config
        tokenized = [self.embedding_tokens(t) for t in texts]

        vocab_index: Dict[str, int] = {}
        doc_freq: Counter = Counter()
        for words in tokenized:
            for w in words:
                if w not in vocab_index:
                    vocab_index[w] = len(vocab_index)
            doc_freq.update(set(words))
        vocabulary = list(vocab_index.keys())[: cfg.embedding_max_vocab_size]
        index = {w: j for j, w in enumerate(vocabulary)}

        matrix = np.zeros((len(texts), len(vocabulary)), dtype=np.float64)
        for i, words in enumerate(tokenized):
            n_words = len(words)
            for position, w in enumerate(words):
                j = index.get(w)
                if j is None:
                    continue
                weight = cfg.position_weight if position in (0, n_words - 1) else 1.0
                matrix[i, j] += (1.0 / n_words) * weight
            for first, second in zip(words, words[1:]):
                j1 = index.get(first)
                j2 = index.get(second)
                if j1 is not None and j2 is not None:
                    matrix[i, j1] += cfg.cooccurrence_boost
                    matrix[i, j2] += cfg.cooccurrence_boost

        vectors = self._l2_normalize(matrix)
        self._log(
            f"[VectorSpaceBuilder] Embedding space: {len(texts)} documents × {len(vocabulary)} words.",
            verbose,
        )
        return VectorSpace(
            vocabulary=vocabulary,
            vectors=vectors,
            document_frequency={w: int(doc_freq[w]) for w in vocabulary},
            mode="embedding",
        )

    @staticmethod
    def _l2_normalize(matrix: np.ndarray) -> np.ndarray:
        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            return matrix
        # sklearn leaves all-zero rows untouched
        return normalize(matrix, norm="l2", axis=1)


class DimensionalityReducer:
    """
    Cheap deterministic 2D projection (not a real PCA).

    Vectors are centred on the per-dimension corpus mean, then dimension
    ``i`` contributes ``cos(i * step)`` to axis 1 and ``sin(i * step)`` to
    axis 2.
    """

    def __init__(self, step: float = 0.1) -> None:
        if step <= 0:
            raise ValueError("step must be > 0.")
        self.step = step

    def reduce(self, vectors: np.ndarray) -> np.ndarray:
        X = np.asarray(vectors, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError("vectors must be a 2D array of shape (n_documents, dim).")
        if X.shape[0] == 0:
            return np.zeros((0, 2), dtype=np.float64)

        centered = X - X.mean(axis=0, keepdims=True)
        angles = np.arange(X.shape[1], dtype=np.float64) * self.step
        basis = np.stack([np.cos(angles), np.sin(angles)], axis=1)  # (dim, 2)
        return centered @ basis
