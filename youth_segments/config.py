# Configuration constants and per-track configuration objects
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

# ======================= CONFIG =======================
OUTPUT_DIR = "outputs"
SEED = 42
DPI = 150

# Study population
MIN_AGE = 15
MAX_AGE = 24

# Clustering
N_CLUSTERS = 3            # K per track in the reference study
KMEANS_N_INIT = 25        # random restarts, best inertia kept
KMEANS_MAX_ITER = 300     # Lloyd iterations per restart
PAM_MAX_ITER = 100        # SWAP iterations
K_RANGE = range(2, 8)     # diagnostic silhouette sweep

# Gower / PCA column type tags
NUMERIC = "numeric"
ORDINAL = "ordinal"
NOMINAL = "nominal"
BINARY = "binary"
FEATURE_TYPES = (NUMERIC, ORDINAL, NOMINAL, BINARY)
CATEGORICAL_TYPES = (NOMINAL, BINARY)

# Respondent identity
ID_PARTS = ["cluster_id", "household_id", "person_id"]
ID_COL = "respondent_id"
UNKNOWN_LABEL = "Unknown/Excluded"

# Demographic strata for cross-tabulation
STRATA = ("sex", "wealth_quintile")
WEALTH_LEVELS = ["Poorest", "Poorer", "Middle", "Richer", "Richest"]
SEX_LEVELS = ["Male", "Female"]

# Feature definitions
MEDIA_FEATURES: Dict[str, str] = {
    "age": NUMERIC,
    "education": ORDINAL,
    "newspaper": ORDINAL,
    "radio": ORDINAL,
    "tv": ORDINAL,
    "computer_use": BINARY,
    "internet_use": ORDINAL,
    "mobile_phone": BINARY,
}

RISK_FEATURES: Dict[str, str] = {
    "age": NUMERIC,
    "education": ORDINAL,
    "residence": NOMINAL,
    "internet_use": ORDINAL,
    "mobile_phone": BINARY,
    "condom_last_sex": BINARY,
    "nonspousal_partner": BINARY,
}

# Semantic names, lowest ranking score first
MEDIA_LABELS = ("Disconnected Younger Youth", "Traditional Access", "Digital Media Consumers")
RISK_LABELS = ("Low-Risk, Low-Media", "Cautious Digital Adopters", "Digitally Active, High-Risk")

# Ranking statistics: column -> +1 (higher is more) / -1 (higher is less)
MEDIA_SCORE = {"computer_use": 1, "internet_use": 1, "mobile_phone": 1}
RISK_SCORE = {"internet_use": 1, "nonspousal_partner": 1, "condom_last_sex": -1}


@dataclass(frozen=True)
class LabelScheme:
    """Names assigned to clusters in ascending order of a ranking score."""
    names: Tuple[str, ...]
    score_columns: Dict[str, int] = field(default_factory=dict)
    fallback_prefix: str = "Segment"

    def names_for(self, k: int) -> Tuple[str, ...]:
        if k == len(self.names):
            return tuple(self.names)
        return tuple(f"{self.fallback_prefix} {rank}" for rank in range(1, k + 1))


@dataclass(frozen=True)
class TrackConfig:
    """Everything one segmentation track needs; tracks never share one."""
    tag: str
    method: str                         # "kmeans" or "pam"
    feature_types: Dict[str, str]
    label_scheme: LabelScheme
    n_clusters: int = N_CLUSTERS
    seed: int = SEED
    n_init: int = KMEANS_N_INIT
    max_iter: int = KMEANS_MAX_ITER
    min_age: int = MIN_AGE
    max_age: int = MAX_AGE
    sexually_active_only: bool = False
    strata: Tuple[str, ...] = STRATA

    @property
    def features(self):
        return list(self.feature_types)

    @property
    def filter_columns(self):
        cols = ["age"]
        if self.sexually_active_only:
            cols.append("recent_sex")
        return cols


def media_track_config(**overrides) -> TrackConfig:
    """Track 1: all youth, numeric media-access features, k-means."""
    cfg = TrackConfig(
        tag="media",
        method="kmeans",
        feature_types=dict(MEDIA_FEATURES),
        label_scheme=LabelScheme(MEDIA_LABELS, dict(MEDIA_SCORE), "Media segment"),
    )
    return replace(cfg, **overrides)


def risk_track_config(**overrides) -> TrackConfig:
    """Track 2: sexually-active youth, mixed features, Gower + PAM."""
    cfg = TrackConfig(
        tag="risk",
        method="pam",
        feature_types=dict(RISK_FEATURES),
        label_scheme=LabelScheme(RISK_LABELS, dict(RISK_SCORE), "Risk segment"),
        max_iter=PAM_MAX_ITER,
        sexually_active_only=True,
    )
    return replace(cfg, **overrides)
