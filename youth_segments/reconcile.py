# Join of Track 2 (risk) segments onto Track 1 (media) segments
import logging
from typing import Optional

import pandas as pd

from .config import ID_COL, UNKNOWN_LABEL

logger = logging.getLogger(__name__)


def reconcile_tracks(media: Optional[pd.DataFrame], risk: pd.DataFrame,
                     unknown: str = UNKNOWN_LABEL) -> pd.DataFrame:
    """
    One row per Track 2 respondent with their Track 1 segment, if any.

    Args:
        media: Track 1 table indexed by respondent id with cluster/label
            columns, or None when Track 1 failed
        risk: Track 2 table indexed by respondent id with cluster/label

    Returns:
        DataFrame with respondent_id, risk_cluster, risk_label,
        media_cluster (nullable) and media_label (``unknown`` when absent)
    """
    left = risk[["cluster", "label"]].rename(columns={"cluster": "risk_cluster", "label": "risk_label"})
    left = left.rename_axis(ID_COL).reset_index()

    if media is None:
        logger.warning("[reconcile] No media segments available; every media label set to '%s'", unknown)
        right = pd.DataFrame({ID_COL: pd.Series(dtype=left[ID_COL].dtype),
                              "media_cluster": pd.Series(dtype="Int64"),
                              "media_label": pd.Series(dtype=object)})
    else:
        right = media[["cluster", "label"]].rename(columns={"cluster": "media_cluster", "label": "media_label"})
        right = right.rename_axis(ID_COL).reset_index()

    joined = left.merge(right, on=ID_COL, how="left", validate="one_to_one")
    joined["media_cluster"] = joined["media_cluster"].astype("Int64")
    n_unknown = int(joined["media_label"].isna().sum())
    joined["media_label"] = joined["media_label"].fillna(unknown)

    logger.info("[reconcile] %s risk respondents, %s without a media segment",
                f"{len(joined):,}", f"{n_unknown:,}")
    return joined


def reconciled_summary(reconciled: pd.DataFrame) -> pd.DataFrame:
    """Row percentages of media segment within each risk segment."""
    ct = pd.crosstab(reconciled["risk_label"], reconciled["media_label"], normalize="index") * 100
    return ct.round(1)
