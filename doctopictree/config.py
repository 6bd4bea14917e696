"""
config.py

Tunable parameters for a doctopictree run.

The original pipeline variants each hard-coded slightly different eps
schedules, vocabulary caps and keyword multipliers. Here they are gathered
into one validated :class:`ClusteringConfig` so that callers can tune a run
without touching algorithm code.
"""

from __future__ import annotations

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class DensityStep(BaseModel):
    """
    One step of the corpus-size-adaptive density schedule.

    Attributes
    ----------
    max_documents:
        The step applies to corpora with ``n < max_documents``.
        ``None`` marks the open-ended last step.
    min_cluster_size:
        Lower bound for the DBSCAN minimum cluster size.
    min_cluster_fraction:
        If > 0, the minimum cluster size becomes
        ``max(min_cluster_size, floor(n * min_cluster_fraction))``.
    eps:
        Euclidean neighbourhood radius (embedding / 2D mode).
    similarity_threshold:
        Cosine similarity threshold (TF-IDF mode). Higher is closer.
    """

    max_documents: Optional[int] = Field(default=None, ge=1)
    min_cluster_size: int = Field(default=2, ge=1)
    min_cluster_fraction: float = Field(default=0.0, ge=0.0, le=1.0)
    eps: float = Field(default=0.25, gt=0.0)
    similarity_threshold: float = Field(default=0.3, ge=-1.0, le=1.0)

    def resolve_min_cluster_size(self, n_documents: int) -> int:
        if self.min_cluster_fraction > 0.0:
            return max(self.min_cluster_size, int(math.floor(n_documents * self.min_cluster_fraction)))
        return self.min_cluster_size


def default_density_schedule() -> List[DensityStep]:
    """Smaller corpora get a looser radius; larger ones tighten both knobs."""
    return [
        DensityStep(max_documents=10, min_cluster_size=2, eps=0.25, similarity_threshold=0.30),
        DensityStep(max_documents=30, min_cluster_size=2, eps=0.15, similarity_threshold=0.35),
        DensityStep(max_documents=100, min_cluster_size=3, eps=0.12, similarity_threshold=0.40),
        DensityStep(
            max_documents=None,
            min_cluster_size=3,
            min_cluster_fraction=0.03,
            eps=0.08,
            similarity_threshold=0.45,
        ),
    ]


class ClusteringConfig(BaseModel):
    # ingest / preprocessing
    min_content_length: int = Field(default=50, ge=0)
    min_token_length: int = Field(default=3, ge=1)

    # term extraction
    bigram_min_token_length: int = Field(default=4, ge=1)
    keyword_top_n: int = Field(default=12, ge=1, le=100)
    technical_boost: float = Field(default=3.0, gt=0.0)
    generic_penalty: float = Field(default=0.3, gt=0.0)
    long_word_length: int = Field(default=8, ge=1)
    long_word_bonus: float = Field(default=1.5, gt=0.0)
    medium_word_length: int = Field(default=6, ge=1)
    medium_word_bonus: float = Field(default=1.2, gt=0.0)

    # summaries
    summarize: bool = True
    summary_max_sentences: int = Field(default=10, ge=1)
    summary_min_length: int = Field(default=500, ge=0)
    extract_terms_from_summary: bool = False

    # vector space
    vector_mode: Literal["tfidf", "embedding"] = "tfidf"
    min_df_ratio: float = Field(default=0.05, ge=0.0, le=1.0)
    max_df_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    max_vocab_size: int = Field(default=1000, ge=1)
    relax_df_window: bool = True
    embedding_max_vocab_size: int = Field(default=1500, ge=1)
    position_weight: float = Field(default=1.2, gt=0.0)
    cooccurrence_boost: float = Field(default=0.1, ge=0.0)
    projection_step: float = Field(default=0.1, gt=0.0)

    # density clustering
    density_schedule: List[DensityStep] = Field(default_factory=default_density_schedule)

    # labeling
    ctfidf_epsilon: float = Field(default=0.01, gt=0.0)
    ctfidf_top_n: int = Field(default=8, ge=1)
    content_label_suffix: bool = False
    brief_word_limit: int = Field(default=500, ge=0)
    comprehensive_word_limit: int = Field(default=5000, ge=0)

    # hierarchy
    subdivision_threshold: int = Field(default=8, ge=1)
    max_depth: int = Field(default=6, ge=1)
    subdivision_eps_step: float = Field(default=0.1, ge=0.0)
    subdivision_eps_floor: float = Field(default=0.2, ge=0.0)
    midpoint_split: bool = True

    @field_validator("density_schedule")
    @classmethod
    def _check_schedule(cls, steps: List[DensityStep]) -> List[DensityStep]:
        if not steps:
            raise ValueError("density_schedule must contain at least one DensityStep.")
        bounded = [s.max_documents for s in steps if s.max_documents is not None]
        if bounded != sorted(bounded):
            raise ValueError("density_schedule steps must be ordered by increasing max_documents.")
        if any(s.max_documents is None for s in steps[:-1]):
            raise ValueError("Only the last density_schedule step may be open-ended (max_documents=None).")
        return steps

    def density_step_for(self, n_documents: int) -> DensityStep:
        """Return the schedule step that covers a corpus of ``n_documents``."""
        for step in self.density_schedule:
            if step.max_documents is None or n_documents < step.max_documents:
                return step
        return self.density_schedule[-1]

    def document_frequency_bounds(self, n_documents: int) -> tuple[int, int]:
        """Inclusive ``(low, high)`` document-frequency window for the vocabulary."""
        # round first: 60 * 0.05 == 3.0000000000000004
        low = max(1, int(math.ceil(round(n_documents * self.min_df_ratio, 9))))
        high = int(math.floor(round(n_documents * self.max_df_ratio, 9)))
        return low, high
