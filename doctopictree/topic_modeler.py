"""
topic_modeler.py

End-to-end document topic modeling for doctopictree.

- Validates plain-text document records (ingestion is external).
- Optionally summarizes documents (local extractive summarizer, or an
  LLM / OpenAI Agents SDK backend with local fallback).
- Extracts high-value unigram/bigram terms; documents without any are
  dropped and reported.
- Builds TF-IDF vectors (clustered with cosine similarity) or lightweight
  summary embeddings (projected to 2D, clustered with Euclidean eps).
- Runs corpus-size-adaptive density clustering, scores confidences and
  assembles the labeled topic tree.

All steps after summarization are deterministic and CPU-bound; the tree is
only available once the whole run has finished.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from ._logging import LoggingMixin
from .cluster_labeler import ClusterLabeler
from .config import ClusteringConfig
from .density_clusterer import DensityClusterer
from .documents import Document, DroppedDocument, RecordLike, ingest_records
from .hierarchy import ClusterNode, HierarchyBuilder
from .lexicon import DEFAULT_LEXICON, Lexicon
from .summarizer import DocumentSummarizer
from .term_extractor import TermExtractor
from .text_preprocessor import TextPreprocessor
from .vector_space import DimensionalityReducer, VectorSpaceBuilder


_DOCUMENT_COLUMNS = ["name", "cluster_id", "confidence", "topic_label", "size", "n_terms", "x", "y"]


@dataclass
class TopicTreeResult:
    """
    Output of :meth:`DocumentTopicModeler.fit`.

    Attributes
    ----------
    root:
        Root of the topic tree, or ``None`` when no document survived
        filtering. May be a single cluster node or even a single document
        leaf (single-node shortcut).
    documents:
        Clustered documents, term-annotated, in input order.
    dropped:
        Records excluded from clustering, with the reason.
    vocabulary:
        Vector-space vocabulary (column order of the vectors).
    assignments:
        Top-level cluster id (or -1) per document.
    confidences:
        Confidence per document, aligned with ``documents``.
    points:
        2D coordinates per document, for plotting.
    documents_df:
        One row per clustered document. Columns: 'name', 'cluster_id',
        'confidence', 'topic_label', 'size', 'n_terms', 'x', 'y'.
    config:
        Resolved configuration plus run counters, for reproducibility.
    """

    root: Optional[ClusterNode]
    documents: List[Document]
    dropped: List[DroppedDocument]
    vocabulary: List[str]
    assignments: np.ndarray
    confidences: np.ndarray
    points: np.ndarray
    documents_df: pd.DataFrame
    config: Dict[str, Any]


class DocumentTopicModeler(LoggingMixin):
    """
    Document-level topic tree builder.

    Notes
    -----
    The collaborators can be injected (e.g. a ``DocumentSummarizer`` wired
    to an Agent); everything else is built from ``config`` and ``lexicon``.
    """

    def __init__(
        self,
        config: Optional[ClusteringConfig] = None,
        *,
        preprocessor: Optional[TextPreprocessor] = None,
        term_extractor: Optional[TermExtractor] = None,
        summarizer: Optional[DocumentSummarizer] = None,
        lexicon: Optional[Lexicon] = None,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or ClusteringConfig()
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.logger = logger
        cfg = self.config

        self.preprocessor = preprocessor or TextPreprocessor(
            lexicon=self.lexicon,
            min_token_length=cfg.min_token_length,
        )
        self.term_extractor = term_extractor or TermExtractor(
            self.preprocessor,
            lexicon=self.lexicon,
            config=cfg,
        )
        self.summarizer = summarizer or DocumentSummarizer(
            max_sentences=cfg.summary_max_sentences,
            min_length=cfg.summary_min_length,
            lexicon=self.lexicon,
            log_fn=logger or print,
        )
        self.metric = "cosine" if cfg.vector_mode == "tfidf" else "euclidean"
        self.vector_builder = VectorSpaceBuilder(cfg, lexicon=self.lexicon, logger=logger)
        self.reducer = DimensionalityReducer(step=cfg.projection_step)
        self.clusterer = DensityClusterer(self.metric, cfg, logger=logger)
        self.labeler = ClusterLabeler(
            self.term_extractor,
            config=cfg,
            lexicon=self.lexicon,
            logger=logger,
        )
        self.hierarchy_builder = HierarchyBuilder(
            self.clusterer,
            self.labeler,
            cfg,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Public sync entrypoint
    # ------------------------------------------------------------------

    def fit(self, records: Iterable[RecordLike], *, verbose: bool = False) -> TopicTreeResult:
        """
        Synchronous wrapper around :meth:`fit_async`.

        Raises a clear error if called from an already-running event loop
        (common in Jupyter) to avoid silent hangs.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            raise RuntimeError(
                "DocumentTopicModeler.fit() was called from an async "
                "context (e.g. Jupyter). Please use "
                "`await fit_async(...)` instead."
            )
        return asyncio.run(self.fit_async(records, verbose=verbose))

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def fit_async(self, records: Iterable[RecordLike], *, verbose: bool = False) -> TopicTreeResult:
        """
        Run the full pipeline on ``records``.

        Steps
        -----
        1. Validate records and drop unusable ones.
        2. Summarize documents (optional, concurrent).
        3. Extract terms; drop documents without meaningful terms.
        4. Build the vector space (TF-IDF or lightweight embeddings).
        5. Resolve the clustering space (full vectors or 2D projection).
        6. Density clustering.
        7. Confidence scores.
        8. Topic tree assembly.

        Returns
        -------
        TopicTreeResult
        """
        cfg = self.config
        records = list(records)

        # --------------------------------------------------------------
        # 1. Ingest
        # --------------------------------------------------------------
        ingest = ingest_records(
            records,
            min_content_length=cfg.min_content_length,
            logger=lambda message: self._log(message, verbose),
        )
        documents = ingest.documents
        dropped = list(ingest.dropped)
        self._log(
            f"[DocumentTopicModeler] Step 1/8 – {len(documents)} of {len(records)} record(s) "
            f"accepted, {len(dropped)} dropped.",
            verbose,
        )

        # --------------------------------------------------------------
        # 2. Summaries
        # --------------------------------------------------------------
        if cfg.summarize:
            pending = [i for i, doc in enumerate(documents) if not doc.summary]
            summaries = await self.summarizer.summarize_many_async(
                [documents[i].content for i in pending]
            )
            for i, summary in zip(pending, summaries):
                if summary and summary != documents[i].content:
                    documents[i] = replace(documents[i], summary=summary)
            self._log(
                f"[DocumentTopicModeler] Step 2/8 – summarized {len(pending)} document(s).",
                verbose,
            )
        else:
            self._log("[DocumentTopicModeler] Step 2/8 – summarization disabled.", verbose)

        # --------------------------------------------------------------
        # 3. Terms
        # --------------------------------------------------------------
        annotated: List[Document] = []
        for doc in documents:
            source = doc.summary if (cfg.extract_terms_from_summary and doc.summary) else doc.content
            terms = self.term_extractor.extract_terms(source)
            if not terms:
                dropped.append(
                    DroppedDocument(name=doc.name, reason="no meaningful terms", content_length=doc.char_count)
                )
                self._log(f"[ingest] Skipping {doc.name}: no meaningful terms ({doc.char_count} chars)", verbose)
                continue
            annotated.append(replace(doc, terms=terms))
        documents = annotated
        self._log(
            f"[DocumentTopicModeler] Step 3/8 – {len(documents)} document(s) with terms.",
            verbose,
        )

        # --------------------------------------------------------------
        # 4. Vector space
        # --------------------------------------------------------------
        if cfg.vector_mode == "tfidf":
            space = self.vector_builder.build_vectors([doc.terms for doc in documents], verbose=verbose)
        else:
            space = self.vector_builder.build_embeddings([doc.label_text for doc in documents], verbose=verbose)
        vectors = space.vectors
        self._log(
            f"[DocumentTopicModeler] Step 4/8 – {cfg.vector_mode} vectors over "
            f"{len(space.vocabulary)} term(s).",
            verbose,
        )

        # --------------------------------------------------------------
        # 5. Clustering space
        # --------------------------------------------------------------
        projection = self.reducer.reduce(vectors)
        points = vectors if self.metric == "cosine" else projection
        self._log(
            f"[DocumentTopicModeler] Step 5/8 – clustering in "
            f"{'full vector' if self.metric == 'cosine' else '2D projected'} space ({self.metric}).",
            verbose,
        )

        # --------------------------------------------------------------
        # 6. Density clustering
        # --------------------------------------------------------------
        assignments = self.clusterer.cluster(points, n=len(documents), verbose=verbose)
        n_clusters = len({int(a) for a in assignments if a != -1})
        n_outliers = int((assignments == -1).sum())
        self._log(
            f"[DocumentTopicModeler] Step 6/8 – {n_clusters} cluster(s), {n_outliers} outlier(s).",
            verbose,
        )

        # --------------------------------------------------------------
        # 7. Confidence
        # --------------------------------------------------------------
        confidences = self.labeler.confidence_scores(vectors, assignments)
        self._log("[DocumentTopicModeler] Step 7/8 – confidence scores computed.", verbose)

        # --------------------------------------------------------------
        # 8. Hierarchy
        # --------------------------------------------------------------
        root = self.hierarchy_builder.build(
            documents,
            assignments,
            vectors,
            points=points,
            confidences=confidences,
            verbose=verbose,
        )
        if root is None:
            self._log("[DocumentTopicModeler] Step 8/8 – empty corpus, no topic tree.", verbose)
        else:
            self._log(f"[DocumentTopicModeler] Step 8/8 – topic tree rooted at '{root.name}'.", verbose)

        documents_df = self._documents_frame(documents, assignments, confidences, projection, root)

        config = cfg.model_dump()
        config.update(
            {
                "metric": self.metric,
                "summarizer_backend": (
                    "agent" if self.summarizer.agent is not None
                    else "llm" if self.summarizer.llm is not None
                    else "lightweight"
                ),
                "num_records": len(records),
                "num_documents": len(documents),
                "num_dropped": len(dropped),
                "vocabulary_size": len(space.vocabulary),
                "relaxed_vocabulary": space.relaxed_window,
                "num_clusters": n_clusters,
                "num_outliers": n_outliers,
            }
        )

        return TopicTreeResult(
            root=root,
            documents=documents,
            dropped=dropped,
            vocabulary=list(space.vocabulary),
            assignments=assignments,
            confidences=confidences,
            points=projection,
            documents_df=documents_df,
            config=config,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _documents_frame(
        documents: List[Document],
        assignments: np.ndarray,
        confidences: np.ndarray,
        projection: np.ndarray,
        root: Optional[ClusterNode],
    ) -> pd.DataFrame:
        if root is None:
            return pd.DataFrame(columns=_DOCUMENT_COLUMNS)

        # top-level node label per document, keyed by object identity
        top_nodes = root.children if root.id == "root" else [root]
        labels: Dict[int, str] = {}
        for node in top_nodes:
            label = node.topic_info.label if node.is_leaf and node.topic_info else node.name
            for doc in node.documents:
                labels[id(doc)] = label

        rows = [
            {
                "name": doc.name,
                "cluster_id": int(assignments[i]),
                "confidence": float(confidences[i]),
                "topic_label": labels.get(id(doc)),
                "size": doc.size,
                "n_terms": doc.total_terms,
                "x": float(projection[i, 0]),
                "y": float(projection[i, 1]),
            }
            for i, doc in enumerate(documents)
        ]
        return pd.DataFrame(rows, columns=_DOCUMENT_COLUMNS)
