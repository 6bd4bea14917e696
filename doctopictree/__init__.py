"""
doctopictree

Lightweight document clustering into a labeled topic hierarchy.

High-level API
--------------
- DocumentTopicModeler → records in, labeled topic tree out
- TextPreprocessor / TermExtractor → heuristic term extraction
- DocumentSummarizer  → local extractive summaries, or LLM / Agent backed
- VectorSpaceBuilder  → TF-IDF vectors or lightweight summary embeddings
- DensityClusterer    → corpus-size-adaptive DBSCAN
- ClusterLabeler      → C-TF-IDF labels, outlier labels, confidences
- HierarchyBuilder    → recursive subdivision into a ClusterNode tree
"""

from importlib.metadata import PackageNotFoundError, version

from .config import ClusteringConfig, DensityStep
from .lexicon import DEFAULT_LEXICON, Lexicon
from .documents import (
    Document,
    DocumentRecord,
    DroppedDocument,
    IngestResult,
    ingest_records,
)
from .text_preprocessor import TextPreprocessor
from .term_extractor import KeywordScore, TermExtractor
from .summarizer import DocumentSummarizer, lightweight_summarize
from .vector_space import DimensionalityReducer, VectorSpace, VectorSpaceBuilder
from .density_clusterer import DensityClusterer, DensityParams
from .cluster_labeler import ClusterLabel, ClusterLabeler, DistinctiveTerm, TopicInfo
from .hierarchy import ClusterNode, HierarchyBuilder, hierarchy_frame, iter_leaves
from .topic_modeler import DocumentTopicModeler, TopicTreeResult


# ---------------------------------------------------------------------
# Runtime version (single source of truth = pyproject.toml)
# ---------------------------------------------------------------------
try:
    __version__ = version("doctopictree")
except PackageNotFoundError:
    # Fallback when running directly from a clone without installation
    __version__ = "0.0.0"

__all__ = [
    "ClusteringConfig",
    "DensityStep",
    "Lexicon",
    "DEFAULT_LEXICON",
    "Document",
    "DocumentRecord",
    "DroppedDocument",
    "IngestResult",
    "ingest_records",
    "TextPreprocessor",
    "TermExtractor",
    "KeywordScore",
    "DocumentSummarizer",
    "lightweight_summarize",
    "VectorSpace",
    "VectorSpaceBuilder",
    "DimensionalityReducer",
    "DensityClusterer",
    "DensityParams",
    "ClusterLabeler",
    "ClusterLabel",
    "DistinctiveTerm",
    "TopicInfo",
    "ClusterNode",
    "HierarchyBuilder",
    "hierarchy_frame",
    "iter_leaves",
    "DocumentTopicModeler",
    "TopicTreeResult",
    "__version__",
]
