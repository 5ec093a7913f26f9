# K-means and PAM partitioners sharing one assignment contract
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
import kmedoids
from sklearn.cluster import KMeans
from sklearn.metrics import silhouette_score

from .config import KMEANS_N_INIT, KMEANS_MAX_ITER, PAM_MAX_ITER, K_RANGE, SEED
from .distance import count_distinct
from .errors import ConvergenceError, InsufficientDataError

logger = logging.getLogger(__name__)


@dataclass
class PartitionResult:
    """Cluster ids 1..K per respondent plus fit diagnostics."""
    assignment: pd.Series
    k: int
    objective: float
    n_iter: int
    converged: bool
    centers: object = None
    method: str = ""
    extra: dict = field(default_factory=dict)

    @property
    def sizes(self) -> pd.Series:
        return self.assignment.value_counts().sort_index()


def _check_k(k: int, n_distinct: int, method: str):
    if k < 2:
        raise InsufficientDataError(f"{method}: need k >= 2, got k={k}")
    if k >= n_distinct:
        raise InsufficientDataError(
            f"{method}: k={k} clusters requested but only {n_distinct} distinct records"
        )


def _kmeans_is_fixpoint(X: np.ndarray, labels: np.ndarray, centers: np.ndarray) -> bool:
    """True when another Lloyd update would leave the centroids where they are."""
    for j in range(centers.shape[0]):
        members = X[labels == j]
        if len(members) == 0:
            return False
        if not np.allclose(members.mean(axis=0), centers[j], rtol=1e-6, atol=1e-9):
            return False
    return True


def _pam_is_fixpoint(D: np.ndarray, medoids: np.ndarray) -> bool:
    """True when a further SWAP pass from ``medoids`` finds no improving swap."""
    check = kmedoids.pam(D, np.array(medoids, dtype=np.int64), max_iter=1)
    return int(check.n_swap) == 0


class Partitioner:
    """Assign each record to one of K clusters."""
    name = "partitioner"
    precomputed = False

    def partition(self, data: pd.DataFrame, k: int, seed: int = SEED) -> PartitionResult:
        raise NotImplementedError


class KMeansPartitioner(Partitioner):
    """
    Lloyd's k-means on a standardised numeric matrix.

    Runs ``n_init`` restarts from random initial centroids with a fixed
    seed and keeps the restart with the lowest within-cluster sum of squares.
    """
    name = "kmeans"

    def __init__(self, n_init: int = KMEANS_N_INIT, max_iter: int = KMEANS_MAX_ITER):
        self.n_init = n_init
        self.max_iter = max_iter

    def partition(self, data: pd.DataFrame, k: int, seed: int = SEED) -> PartitionResult:
        X = data.to_numpy(dtype=float)
        if np.isnan(X).any():
            raise ValueError("kmeans: feature matrix contains missing values")
        _check_k(k, len(data.drop_duplicates()), self.name)

        km = KMeans(n_clusters=k, init="random", n_init=self.n_init,
                    max_iter=self.max_iter, algorithm="lloyd", random_state=seed)
        labels = km.fit_predict(X)

        centers = pd.DataFrame(km.cluster_centers_, columns=data.columns,
                               index=pd.RangeIndex(1, k + 1, name="cluster"))
        result = PartitionResult(
            assignment=pd.Series(labels.astype(int) + 1, index=data.index, name="cluster"),
            k=k,
            objective=float(km.inertia_),
            n_iter=int(km.n_iter_),
            converged=int(km.n_iter_) < self.max_iter or _kmeans_is_fixpoint(X, labels, km.cluster_centers_),
            centers=centers,
            method=self.name,
        )
        logger.debug("kmeans k=%d inertia=%.4f iterations=%d", k, result.objective, result.n_iter)

        if not result.converged:
            raise ConvergenceError(
                f"kmeans: no convergence within {self.max_iter} iterations (k={k}, seed={seed})",
                result,
            )
        return result


class PAMPartitioner(Partitioner):
    """
    Partitioning Around Medoids on a precomputed dissimilarity matrix.

    BUILD picks the initial medoids greedily, SWAP then exchanges medoids
    with non-medoids while the total dissimilarity decreases. Both phases
    are deterministic; ``seed`` is accepted for the shared contract.
    """
    name = "pam"
    precomputed = True

    def __init__(self, max_iter: int = PAM_MAX_ITER):
        self.max_iter = max_iter

    def partition(self, data: pd.DataFrame, k: int, seed: int = SEED) -> PartitionResult:
        D = np.ascontiguousarray(data.to_numpy(dtype=np.float64))
        if D.shape[0] != D.shape[1]:
            raise ValueError(f"pam: dissimilarity matrix must be square, got {D.shape}")
        _check_k(k, count_distinct(data), self.name)

        res = kmedoids.pam(D, k, max_iter=self.max_iter, init="build")
        labels = np.asarray(res.labels).astype(int)
        medoid_pos = np.asarray(res.medoids).astype(int)

        # label j refers to medoids[j]
        assignment = pd.Series(labels + 1, index=data.index, name="cluster")
        medoids = pd.Series(data.index[medoid_pos], index=pd.RangeIndex(1, k + 1, name="cluster"),
                            name="medoid")

        n_iter = int(res.n_iter)
        result = PartitionResult(
            assignment=assignment,
            k=k,
            objective=float(res.loss),
            n_iter=n_iter,
            converged=n_iter < self.max_iter or _pam_is_fixpoint(D, medoid_pos),
            centers=medoids,
            method=self.name,
            extra={"n_swap": int(res.n_swap)},
        )
        logger.debug("pam k=%d cost=%.4f iterations=%d swaps=%d",
                     k, result.objective, n_iter, result.extra["n_swap"])

        if not result.converged:
            raise ConvergenceError(
                f"pam: no improving-swap fixpoint within {self.max_iter} iterations (k={k})",
                result,
            )
        return result


def make_partitioner(method: str, n_init: int = KMEANS_N_INIT, max_iter: Optional[int] = None) -> Partitioner:
    if method == "kmeans":
        return KMeansPartitioner(n_init=n_init, max_iter=max_iter or KMEANS_MAX_ITER)
    if method == "pam":
        return PAMPartitioner(max_iter=max_iter or PAM_MAX_ITER)
    raise ValueError(f"Unknown partitioning method: {method}")


def silhouette(data: pd.DataFrame, assignment: pd.Series, precomputed: bool = False) -> float:
    """Mean silhouette width; NaN when there is only one cluster."""
    labels = assignment.reindex(data.index).to_numpy()
    if len(np.unique(labels)) < 2:
        return float("nan")
    metric = "precomputed" if precomputed else "euclidean"
    return float(silhouette_score(data.to_numpy(dtype=float), labels, metric=metric))


def silhouette_curve(data: pd.DataFrame, partitioner: Partitioner, k_range=K_RANGE,
                     seed: int = SEED, label: str = "") -> List[Tuple[int, float]]:
    """
    Silhouette score for each candidate k, as a diagnostic for the chosen K.

    Candidates the data cannot support are skipped; unconverged fits are
    scored with the assignment they reached.
    """
    logger.info("[%s] Silhouette sweep over k=%s", label, list(k_range))
    curve = []
    for k in k_range:
        try:
            res = partitioner.partition(data, k, seed)
        except InsufficientDataError:
            logger.info("[%s] k=%d skipped: not enough distinct records", label, k)
            continue
        except ConvergenceError as err:
            res = err.result
        s = silhouette(data, res.assignment, partitioner.precomputed)
        curve.append((k, s))
        logger.info("[%s] k=%d silhouette=%.4f", label, k, s)
    return curve
