# Per-track segmentation pipeline and two-track orchestration
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import TrackConfig, media_track_config, risk_track_config, K_RANGE
from .crosstab import demographic_crosstab
from .distance import gower_distance
from .errors import ConvergenceError, SchemaError, SegmentationError
from .features import FeatureTable, build_feature_table, check_schema
from .labeling import label_clusters, labelled_assignment, profile_clusters
from .partition import PartitionResult, make_partitioner, silhouette, silhouette_curve
from .projection import Projection, project_pca
from .reconcile import reconcile_tracks, reconciled_summary
from .scaling import encode_for_pca, standardize

logger = logging.getLogger(__name__)


@dataclass
class TrackResult:
    """Everything one track publishes; only built once every stage succeeded."""
    config: TrackConfig
    features: FeatureTable
    partition: PartitionResult
    labels: Dict[int, str]
    assignments: pd.DataFrame          # respondent id -> cluster, label
    projection: Projection
    crosstab: pd.DataFrame
    profiles: pd.DataFrame
    silhouette: float
    silhouette_curve: List[Tuple[int, float]] = field(default_factory=list)

    @property
    def tag(self) -> str:
        return self.config.tag

    def pca_table(self) -> pd.DataFrame:
        coords = self.projection.coordinates.join(self.assignments)
        return coords


@dataclass
class AnalysisResult:
    tracks: Dict[str, Optional[TrackResult]]
    errors: Dict[str, SegmentationError]
    reconciled: Optional[pd.DataFrame] = None
    reconciled_summary: Optional[pd.DataFrame] = None


class _Stage:
    """Tags errors escaping a stage with the track and stage names in the log."""

    def __init__(self, tag: str, stage: str):
        self.tag = tag
        self.stage = stage

    def __enter__(self):
        logger.debug("[%s] stage '%s' started", self.tag, self.stage)
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is not None and isinstance(exc, SegmentationError) and not isinstance(exc, ConvergenceError):
            logger.error("[%s] stage '%s' failed: %s", self.tag, self.stage, exc,
                         extra={"track": self.tag, "stage": self.stage})
            exc.track = self.tag
            exc.stage = self.stage
        return False


def run_track(df: pd.DataFrame, config: TrackConfig, sweep_k: bool = False,
              k_range=K_RANGE) -> TrackResult:
    """
    Complete pipeline for one track:
    features -> standardise -> (Gower) -> partition -> label -> PCA -> cross-tab.

    Args:
        df: Cleaned respondent table
        config: Track configuration
        sweep_k: Also compute a silhouette curve over ``k_range`` (diagnostic only)

    Returns:
        TrackResult; any failure raises and nothing is published
    """
    tag = config.tag
    logger.info("=== [%s] %s segmentation, k=%d, seed=%d ===",
                tag, config.method, config.n_clusters, config.seed)

    with _Stage(tag, "features"):
        table = build_feature_table(df, config)

    with _Stage(tag, "standardize"):
        if config.method == "kmeans":
            design = table.numeric_frame()
        else:
            design = encode_for_pca(table.frame, table.feature_types)
        scaled = standardize(design, tag)

    with _Stage(tag, "distance"):
        if config.method == "pam":
            data = gower_distance(table.frame, table.feature_types, tag)
        else:
            data = scaled

    partitioner = make_partitioner(config.method, n_init=config.n_init, max_iter=config.max_iter)
    with _Stage(tag, "partition"):
        try:
            part = partitioner.partition(data, config.n_clusters, config.seed)
        except ConvergenceError as err:
            logger.warning("[%s] %s; using the best assignment at cutoff", tag, err,
                           extra={"track": tag, "stage": "partition"})
            part = err.result
        sil = silhouette(data, part.assignment, partitioner.precomputed)
        curve = silhouette_curve(data, partitioner, k_range, config.seed, tag) if sweep_k else []
    logger.info("[%s] Cluster sizes: %s; silhouette=%.4f", tag,
                part.sizes.to_dict(), sil)

    with _Stage(tag, "label"):
        raw = table.frame
        labels = label_clusters(part.assignment, raw, config.label_scheme, tag)
        assignments = labelled_assignment(part.assignment, labels)
        profiles = profile_clusters(part.assignment, raw, labels, config.label_scheme)

    with _Stage(tag, "project"):
        projection = project_pca(scaled, 2, tag)

    with _Stage(tag, "crosstab"):
        ct = demographic_crosstab(assignments, df, config.strata)

    return TrackResult(
        config=config,
        features=table,
        partition=part,
        labels=labels,
        assignments=assignments,
        projection=projection,
        crosstab=ct,
        profiles=profiles,
        silhouette=sil,
        silhouette_curve=curve,
    )


def run_analysis(df: pd.DataFrame, media_config: Optional[TrackConfig] = None,
                 risk_config: Optional[TrackConfig] = None, sweep_k: bool = False) -> AnalysisResult:
    """
    Run both tracks independently and reconcile their labels.

    Schema problems abort before any computation. Any other failure only
    loses the track it happened in; reconciliation then reports the
    missing media segment as unknown.
    """
    media_config = media_config or media_track_config()
    risk_config = risk_config or risk_track_config()
    configs: Sequence[TrackConfig] = (media_config, risk_config)

    for cfg in configs:
        check_schema(df.columns, cfg)
        missing = [c for c in cfg.strata if c not in df.columns]
        if missing:
            raise SchemaError(missing, f"track '{cfg.tag}' strata")

    tracks: Dict[str, Optional[TrackResult]] = {}
    errors: Dict[str, SegmentationError] = {}
    for cfg in configs:
        try:
            tracks[cfg.tag] = run_track(df, cfg, sweep_k=sweep_k)
        except SegmentationError as err:
            logger.info("[%s] track aborted, no segments published: %s", cfg.tag, err,
                        extra={"track": cfg.tag, "stage": getattr(err, "stage", "unknown")})
            tracks[cfg.tag] = None
            errors[cfg.tag] = err

    result = AnalysisResult(tracks=tracks, errors=errors)

    media_res = tracks.get(media_config.tag)
    risk_res = tracks.get(risk_config.tag)
    if risk_res is not None:
        media_labels = media_res.assignments if media_res is not None else None
        result.reconciled = reconcile_tracks(media_labels, risk_res.assignments)
        result.reconciled_summary = reconciled_summary(result.reconciled)
    else:
        logger.warning("[reconcile] skipped: risk track produced no segments")

    return result
