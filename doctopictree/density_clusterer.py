"""
density_clusterer.py

DBSCAN-style density clustering with corpus-size-adaptive parameters.

Two neighbourhood definitions are supported:

- ``metric="cosine"``: j is a neighbour of i when
  ``cosine_similarity(i, j) >= similarity_threshold`` (higher is closer).
  Used on full-dimensional TF-IDF vectors.
- ``metric="euclidean"``: j is a neighbour of i when
  ``||i - j|| <= eps``. Used on 2D reduced embeddings.

A point is never its own neighbour. Labels are ``-1`` for noise and
``0, 1, 2, ...`` for clusters, in order of discovery.

NOTE
----
Pairwise distances are computed once, so the cost is O(n²) in time and
memory. This is fine up to a few hundred documents and is a deliberate
scalability boundary.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity, euclidean_distances

from ._logging import LoggingMixin
from .config import ClusteringConfig


Metric = Literal["cosine", "euclidean"]


@dataclass(frozen=True)
class DensityParams:
    """
    Resolved parameters for one clustering pass.

    ``radius`` is expressed in distance space for both metrics:
    the Euclidean eps, or ``1 - similarity_threshold`` for cosine.
    """

    min_cluster_size: int
    radius: float
    metric: Metric

    @property
    def eps(self) -> float:
        return self.radius

    @property
    def similarity_threshold(self) -> float:
        return round(1.0 - self.radius, 12)


class DensityClusterer(LoggingMixin):
    """
    Density clustering of document vectors.

    Parameters are picked from ``config.density_schedule`` by corpus size
    unless given explicitly to :meth:`cluster`.
    """

    def __init__(
        self,
        metric: Metric = "cosine",
        config: Optional[ClusteringConfig] = None,
        *,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        if metric not in ("cosine", "euclidean"):
            raise ValueError("metric must be 'cosine' or 'euclidean'.")
        self.metric: Metric = metric
        self.config = config or ClusteringConfig()
        self.logger = logger

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def params_for(self, n_documents: int) -> DensityParams:
        """Schedule-based parameters for a corpus of ``n_documents``."""
        step = self.config.density_step_for(n_documents)
        radius = step.eps if self.metric == "euclidean" else round(1.0 - step.similarity_threshold, 12)
        return DensityParams(
            min_cluster_size=step.resolve_min_cluster_size(n_documents),
            radius=radius,
            metric=self.metric,
        )

    def tightened_params(self, base: DensityParams, depth: int) -> DensityParams:
        """
        Parameters for a subdivision pass at ``depth`` (>= 1).

        radius  = min(base, max(floor, base - depth * step))
        min_pts = max(2, floor(min_cluster_size / 2 ** (depth - 1)))
        """
        if depth < 1:
            raise ValueError("depth must be >= 1 for a subdivision pass.")
        cfg = self.config
        radius = min(
            base.radius,
            max(cfg.subdivision_eps_floor, round(base.radius - depth * cfg.subdivision_eps_step, 12)),
        )
        min_pts = max(2, base.min_cluster_size // (2 ** (depth - 1)))
        return DensityParams(min_cluster_size=min_pts, radius=radius, metric=base.metric)

    # ------------------------------------------------------------------
    # Clustering
    # ------------------------------------------------------------------

    def cluster(
        self,
        points: np.ndarray,
        n: Optional[int] = None,
        *,
        params: Optional[DensityParams] = None,
        verbose: bool = False,
    ) -> np.ndarray:
        """
        Assign a cluster id (or -1) to each point.

        Parameters
        ----------
        points:
            Array of shape (n_points, dim).
        n:
            Corpus size used to pick schedule parameters. Defaults to the
            number of points.
        params:
            Explicit parameters; overrides the schedule.

        Returns
        -------
        np.ndarray
            Integer labels of shape (n_points,).
        """
        X = np.asarray(points, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError("points must be a 2D array of shape (n_points, dim).")
        n_points = X.shape[0]
        if n_points == 0:
            return np.zeros(0, dtype=int)

        if params is None:
            params = self.params_for(n if n is not None else n_points)
        if params.metric != self.metric:
            raise ValueError(
                f"params.metric={params.metric!r} does not match clusterer metric {self.metric!r}."
            )

        adjacency = self._adjacency(X, params)
        labels = self._dbscan(adjacency, params.min_cluster_size)

        n_clusters = int(labels.max()) + 1 if n_points else 0
        self._log(
            f"[DensityClusterer] {n_points} points → {n_clusters} cluster(s), "
            f"{int((labels == -1).sum())} noise (metric={self.metric}, "
            f"min_cluster_size={params.min_cluster_size}, radius={params.radius:.3f}).",
            verbose,
        )
        return labels

    def _adjacency(self, X: np.ndarray, params: DensityParams) -> np.ndarray:
        if self.metric == "cosine":
            if X.shape[1] == 0:
                sims = np.zeros((X.shape[0], X.shape[0]))
            else:
                # zero rows get similarity 0 with everything
                sims = cosine_similarity(X)
            adjacency = sims >= params.similarity_threshold
        else:
            adjacency = euclidean_distances(X) <= params.eps
        np.fill_diagonal(adjacency, False)
        return adjacency

    @staticmethod
    def _dbscan(adjacency: np.ndarray, min_cluster_size: int) -> np.ndarray:
        """
        DBSCAN over a boolean neighbourhood matrix.

        A point reached from a core point joins that cluster even when its
        own neighbourhood is too small (standard border-point semantics),
        including points that were visited earlier and left as noise.
        """
        n = adjacency.shape[0]
        labels = np.full(n, -1, dtype=int)
        visited = np.zeros(n, dtype=bool)
        min_neighbors = min_cluster_size - 1
        neighborhoods: List[List[int]] = [np.flatnonzero(row).tolist() for row in adjacency]

        cluster_id = 0
        for i in range(n):
            if visited[i]:
                continue
            visited[i] = True
            neighbors = neighborhoods[i]
            if len(neighbors) < min_neighbors:
                continue

            labels[i] = cluster_id
            queue = deque(neighbors)
            queued = set(neighbors)
            while queue:
                j = queue.popleft()
                if not visited[j]:
                    visited[j] = True
                    j_neighbors = neighborhoods[j]
                    if len(j_neighbors) >= min_neighbors:
                        for k in j_neighbors:
                            if k not in queued:
                                queued.add(k)
                                queue.append(k)
                if labels[j] == -1:
                    labels[j] = cluster_id

            cluster_id += 1

        return labels
