"""
hierarchy.py

Topic tree assembly.

Tree shape
----------
    root ("Document Collection", level 0)
    ├── cluster_0            (level 1, C-TF-IDF label)
    │   ├── cluster_0_sub_0  (level 2, only for clusters larger than
    │   │   │                 ``subdivision_threshold``)
    │   │   └── cluster_0_sub_0_doc_4   (document leaf)
    │   └── cluster_0_doc_9  (noise of the subdivision pass)
    └── outlier_7            (noise document, level 1)

A large cluster the density pass cannot separate (near-duplicates) is halved
in corpus order into "Part A" / "Part B" sub-clusters instead.

Every document ends up in exactly one leaf and a node's ``size`` is the sum
of its children's sizes (leaf size = character count of the document).

When the top level holds a single node (one cluster, or one outlier), that
node is returned directly as the root, re-levelled to 0. An empty corpus
yields ``None``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from ._logging import LoggingMixin
from .cluster_labeler import ClusterLabeler, TopicInfo
from .config import ClusteringConfig
from .density_clusterer import DensityClusterer, DensityParams
from .documents import Document


@dataclass
class ClusterNode:
    """
    One node of the topic tree.

    ``children`` is ``None`` for document leaves and a (possibly mixed)
    list of sub-cluster nodes and document leaves otherwise.
    """

    id: str
    name: str
    size: int
    level: int
    children: Optional[List["ClusterNode"]] = None
    documents: List[Document] = field(default_factory=list)
    topic_info: Optional[TopicInfo] = None
    topic_summary: Optional[Dict[str, Any]] = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def n_documents(self) -> int:
        return len(self.documents)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready nested dict; documents are referenced by name."""
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "level": self.level,
            "documents": [doc.name for doc in self.documents],
            "topic_info": asdict(self.topic_info) if self.topic_info is not None else None,
            "topic_summary": self.topic_summary,
            "children": None if self.children is None else [c.to_dict() for c in self.children],
        }


def iter_leaves(node: Optional[ClusterNode]) -> Iterator[ClusterNode]:
    """Yield the document leaves of ``node`` in tree order."""
    if node is None:
        return
    if node.is_leaf:
        yield node
        return
    for child in node.children:
        yield from iter_leaves(child)


def hierarchy_frame(root: Optional[ClusterNode]) -> pd.DataFrame:
    """
    Flatten a topic tree into one row per node (pre-order).

    Columns: id, parent_id, name, level, size, n_documents, is_leaf.
    """
    columns = ["id", "parent_id", "name", "level", "size", "n_documents", "is_leaf"]
    rows: List[Dict[str, Any]] = []

    def _walk(node: ClusterNode, parent_id: Optional[str]) -> None:
        rows.append(
            {
                "id": node.id,
                "parent_id": parent_id,
                "name": node.name,
                "level": node.level,
                "size": node.size,
                "n_documents": node.n_documents,
                "is_leaf": node.is_leaf,
            }
        )
        for child in node.children or []:
            _walk(child, node.id)

    if root is not None:
        _walk(root, None)
    frame = pd.DataFrame(rows, columns=columns)
    # object dtype keeps the root's parent_id as None under string-dtype pandas
    frame["parent_id"] = pd.Series([row["parent_id"] for row in rows], index=frame.index, dtype=object)
    return frame


@dataclass(frozen=True)
class _Corpus:
    """Read-only view of the full corpus shared by every subdivision call."""

    documents: Sequence[Document]
    texts: Sequence[str]
    points: np.ndarray
    confidences: np.ndarray


class HierarchyBuilder(LoggingMixin):
    """
    Build the topic tree from top-level cluster assignments.

    Large clusters are recursively re-clustered with tightened density
    parameters (see :meth:`DensityClusterer.tightened_params`). Every
    sub-cluster is named by C-TF-IDF of its members against the rest of the
    full corpus; midpoint halves take their parent's label plus a part suffix.
    """

    def __init__(
        self,
        clusterer: Optional[DensityClusterer] = None,
        labeler: Optional[ClusterLabeler] = None,
        config: Optional[ClusteringConfig] = None,
        *,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or ClusteringConfig()
        self.clusterer = clusterer or DensityClusterer(config=self.config, logger=logger)
        self.labeler = labeler or ClusterLabeler(config=self.config, logger=logger)
        self.logger = logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        documents: Sequence[Document],
        assignments: Sequence[int],
        vectors: np.ndarray,
        *,
        points: Optional[np.ndarray] = None,
        confidences: Optional[Sequence[float]] = None,
        verbose: bool = False,
    ) -> Optional[ClusterNode]:
        """
        Assemble the topic tree.

        Parameters
        ----------
        documents:
            Clustered documents, aligned with ``assignments``.
        assignments:
            Top-level cluster id (or -1) per document.
        vectors:
            Full document vectors, used for confidence scores.
        points:
            Space the clusterer works in for subdivision passes (the 2D
            projection in embedding mode). Defaults to ``vectors``.
        confidences:
            Precomputed confidences; computed from ``vectors`` if omitted.

        Returns
        -------
        ClusterNode or None
            ``None`` for an empty corpus.
        """
        n = len(documents)
        labels = np.asarray(assignments, dtype=int)
        X = np.asarray(vectors, dtype=np.float64)
        if labels.shape[0] != n:
            raise ValueError(f"Got {labels.shape[0]} assignments for {n} documents.")
        if X.shape[0] != n:
            raise ValueError(f"Got {X.shape[0]} vectors for {n} documents.")
        P = X if points is None else np.asarray(points, dtype=np.float64)
        if P.shape[0] != n:
            raise ValueError(f"Got {P.shape[0]} points for {n} documents.")
        if n == 0:
            return None

        if confidences is None:
            conf = self.labeler.confidence_scores(X, labels)
        else:
            conf = np.asarray(confidences, dtype=np.float64)

        corpus = _Corpus(
            documents=documents,
            texts=[doc.label_text for doc in documents],
            points=P,
            confidences=conf,
        )
        base_params = self.clusterer.params_for(n)
        cluster_labels = self.labeler.label_clusters(corpus.texts, labels, verbose=verbose)

        top_nodes: List[ClusterNode] = []
        for cid, cluster_label in cluster_labels.items():
            members = [int(i) for i in np.flatnonzero(labels == cid)]
            node_id = f"cluster_{cid}"
            children = self._subdivide(members, 1, node_id, cid, cluster_label.label, corpus, base_params)
            top_nodes.append(
                self._cluster_node(node_id, cluster_label.label, 1, cid, members, children, corpus)
            )

        for i in np.flatnonzero(labels == -1):
            top_nodes.append(self._outlier_leaf(int(i), corpus))

        self._log(
            f"[HierarchyBuilder] {len(cluster_labels)} cluster(s), "
            f"{int((labels == -1).sum())} outlier(s), {n} document(s).",
            verbose,
        )

        summary = self._topic_summary(top_nodes, n)
        if len(top_nodes) == 1:
            root = top_nodes[0]
            _relevel(root, 0)
            root.topic_summary = summary
            return root

        return ClusterNode(
            id="root",
            name="Document Collection",
            size=sum(node.size for node in top_nodes),
            level=0,
            children=top_nodes,
            documents=[leaf.documents[0] for node in top_nodes for leaf in iter_leaves(node)],
            topic_summary=summary,
        )

    # ------------------------------------------------------------------
    # Recursion
    # ------------------------------------------------------------------

    def _subdivide(
        self,
        members: List[int],
        depth: int,
        parent_id: str,
        cluster_id: int,
        label: str,
        corpus: _Corpus,
        base_params: DensityParams,
    ) -> List[ClusterNode]:
        """
        Children of the node ``parent_id`` (at level ``depth``, named
        ``label``) holding the corpus indices ``members``.
        """
        cfg = self.config
        leaf_level = depth + 1

        def _leaves(indices: Sequence[int]) -> List[ClusterNode]:
            return [self._document_leaf(i, parent_id, leaf_level, cluster_id, corpus) for i in indices]

        if len(members) <= cfg.subdivision_threshold or depth + 1 >= cfg.max_depth:
            return _leaves(members)

        params = self.clusterer.tightened_params(base_params, depth)
        sub_labels = self.clusterer.cluster(corpus.points[members], params=params)
        sub_ids = sorted(int(s) for s in set(sub_labels.tolist()) if s != -1)
        if len(sub_ids) <= 1:
            if cfg.midpoint_split:
                return self._midpoint_split(members, depth, parent_id, cluster_id, label, corpus)
            return _leaves(members)

        children: List[ClusterNode] = []
        for k, sid in enumerate(sub_ids):
            sub_members = [m for m, s in zip(members, sub_labels) if s == sid]
            member_set = set(sub_members)
            rest = [t for j, t in enumerate(corpus.texts) if j not in member_set]
            sub_label = self.labeler.label_cluster(
                k, [corpus.texts[j] for j in sub_members], rest
            )
            node_id = f"{parent_id}_sub_{k}"
            grandchildren = self._subdivide(
                sub_members, depth + 1, node_id, cluster_id, sub_label.label, corpus, base_params
            )
            children.append(
                self._cluster_node(node_id, sub_label.label, leaf_level, cluster_id, sub_members, grandchildren, corpus)
            )

        children.extend(_leaves([m for m, s in zip(members, sub_labels) if s == -1]))
        return children

    def _midpoint_split(
        self,
        members: List[int],
        depth: int,
        parent_id: str,
        cluster_id: int,
        label: str,
        corpus: _Corpus,
    ) -> List[ClusterNode]:
        """
        Fallback for a large cluster the density pass cannot separate
        (near-duplicates): halve ``members`` in corpus order into
        ``"{label} (Part A)"`` / ``"{label} (Part B)"``, each holding its
        documents as direct leaves.
        """
        midpoint = len(members) // 2
        halves = (("Part A", members[:midpoint]), ("Part B", members[midpoint:]))
        parts: List[ClusterNode] = []
        for k, (suffix, part) in enumerate(halves):
            node_id = f"{parent_id}_sub_{k}"
            leaves = [self._document_leaf(i, node_id, depth + 2, cluster_id, corpus) for i in part]
            parts.append(
                self._cluster_node(node_id, f"{label} ({suffix})", depth + 1, cluster_id, part, leaves, corpus)
            )
        return parts

    # ------------------------------------------------------------------
    # Node factories
    # ------------------------------------------------------------------

    def _cluster_node(
        self,
        node_id: str,
        label: str,
        level: int,
        cluster_id: int,
        members: Sequence[int],
        children: List[ClusterNode],
        corpus: _Corpus,
    ) -> ClusterNode:
        docs = [corpus.documents[i] for i in members]
        return ClusterNode(
            id=node_id,
            name=label,
            size=sum(child.size for child in children),
            level=level,
            children=children,
            documents=docs,
            topic_info=self.labeler.cluster_topic_info(
                cluster_id, docs, label, corpus.confidences[list(members)]
            ),
        )

    def _document_leaf(
        self,
        index: int,
        parent_id: str,
        level: int,
        cluster_id: int,
        corpus: _Corpus,
    ) -> ClusterNode:
        doc = corpus.documents[index]
        colors = self.labeler.lexicon.topic_colors
        confidence = float(corpus.confidences[index])
        return ClusterNode(
            id=f"{parent_id}_doc_{index}",
            name=doc.display_name,
            size=doc.char_count,
            level=level,
            documents=[doc],
            topic_info=TopicInfo(
                label=doc.display_name,
                confidence=confidence,
                color=colors[cluster_id % len(colors)] if colors else None,
                cluster_id=cluster_id,
                document_count=1,
                average_confidence=confidence,
            ),
        )

    def _outlier_leaf(self, index: int, corpus: _Corpus) -> ClusterNode:
        doc = corpus.documents[index]
        return ClusterNode(
            id=f"outlier_{index}",
            name=doc.display_name,
            size=doc.char_count,
            level=1,
            documents=[doc],
            topic_info=self.labeler.outlier_topic_info(doc),
        )

    @staticmethod
    def _topic_summary(top_nodes: Sequence[ClusterNode], n_documents: int) -> Dict[str, Any]:
        clusters = [node for node in top_nodes if not node.is_leaf]
        ranked = sorted(clusters, key=lambda node: node.n_documents, reverse=True)[:5]
        return {
            "total_topics": len(clusters),
            "total_documents": n_documents,
            "top_topics": [
                {
                    "id": node.id,
                    "label": node.name,
                    "document_count": node.n_documents,
                    "representative_terms": list(node.topic_info.representative_terms) if node.topic_info else [],
                    "average_confidence": node.topic_info.average_confidence if node.topic_info else None,
                }
                for node in ranked
            ],
        }


def _relevel(node: ClusterNode, level: int) -> None:
    node.level = level
    for child in node.children or []:
        _relevel(child, level + 1)
