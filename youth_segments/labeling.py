# Rank-based semantic cluster names and cluster profiles
import logging
from typing import Dict

import numpy as np
import pandas as pd

from .config import LabelScheme
from .errors import SchemaError

logger = logging.getLogger(__name__)


def respondent_scores(raw: pd.DataFrame, score_columns: Dict[str, int]) -> pd.Series:
    """
    Per-respondent ranking score on the unstandardised features.

    Each scoring column is range-normalised to [0, 1] over the table
    (reversed when its sign is negative) and the columns are averaged.
    Constant columns contribute 0.
    """
    missing = [c for c in score_columns if c not in raw.columns]
    if missing:
        raise SchemaError(missing, "cluster ranking score")
    if not score_columns:
        return pd.Series(0.0, index=raw.index, name="score")

    parts = []
    for col, sign in score_columns.items():
        x = pd.to_numeric(raw[col]).astype(float)
        lo, hi = x.min(), x.max()
        if hi > lo:
            norm = (x - lo) / (hi - lo)
            if sign < 0:
                norm = 1.0 - norm
        else:
            norm = x * 0.0
        parts.append(norm)
    return pd.concat(parts, axis=1).mean(axis=1).rename("score")


def cluster_scores(assignment: pd.Series, raw: pd.DataFrame, scheme: LabelScheme) -> pd.Series:
    """Mean ranking score for each cluster id."""
    scores = respondent_scores(raw.loc[assignment.index], scheme.score_columns)
    return scores.groupby(assignment).mean().sort_index()


def label_clusters(assignment: pd.Series, raw: pd.DataFrame, scheme: LabelScheme,
                   tag: str = "") -> Dict[int, str]:
    """
    Map cluster ids to names by ranking clusters on the scheme's score.

    The lowest-scoring cluster gets ``names[0]``; ties go to the lower id.
    The numeric ids the algorithm produced play no other part.

    Args:
        assignment: respondent id -> cluster id
        raw: Unstandardised features indexed by respondent id
        scheme: Ordered names and scoring columns

    Returns:
        Dict of cluster id -> semantic name
    """
    means = cluster_scores(assignment, raw, scheme)
    ranked = sorted(means.index, key=lambda cid: (means[cid], cid))
    names = scheme.names_for(len(ranked))
    mapping = {int(cid): names[rank] for rank, cid in enumerate(ranked)}

    for cid in ranked:
        logger.info("[%s] Cluster %d score=%.3f -> %s", tag, cid, means[cid], mapping[int(cid)])
    return mapping


def profile_clusters(assignment: pd.Series, raw: pd.DataFrame, labels: Dict[int, str],
                     scheme: LabelScheme) -> pd.DataFrame:
    """
    One row per cluster: size, share, ranking score and feature summaries.

    Numeric columns are summarised by their mean, categorical ones by their
    most frequent value and its share.
    """
    df = raw.loc[assignment.index]
    scores = respondent_scores(df, scheme.score_columns)
    total = len(assignment)

    profiles = []
    for cid, g in df.groupby(assignment):
        rec = {
            "cluster": int(cid),
            "label": labels.get(int(cid)),
            "n_respondents": int(len(g)),
            "pct_respondents": round(len(g) / total * 100, 1) if total else np.nan,
            "score": round(float(scores.loc[g.index].mean()), 3),
        }
        for col in g.columns:
            series = g[col]
            if pd.api.types.is_numeric_dtype(series):
                rec[f"{col}_mean"] = round(float(series.mean()), 2)
            else:
                vc = series.astype(str).value_counts(normalize=True)
                if len(vc):
                    rec[f"{col}_top"] = vc.index[0]
                    rec[f"{col}_pct"] = round(vc.iloc[0] * 100, 1)
        profiles.append(rec)

    return pd.DataFrame(profiles).sort_values("cluster").reset_index(drop=True)


def labelled_assignment(assignment: pd.Series, labels: Dict[int, str]) -> pd.DataFrame:
    """respondent id -> (cluster, label) table."""
    out = assignment.rename("cluster").to_frame()
    out["label"] = out["cluster"].map(labels)
    return out
