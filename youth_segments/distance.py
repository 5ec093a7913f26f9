# Gower dissimilarity for the mixed-type Track 2 table
import logging
from typing import Dict

import numpy as np
import pandas as pd
import gower

from .config import CATEGORICAL_TYPES, FEATURE_TYPES

logger = logging.getLogger(__name__)


def _gower_input(frame: pd.DataFrame, feature_types: Dict[str, str]):
    """
    Prepare columns for gower.gower_matrix and the matching categorical mask.

    gower normalises numeric columns by their maximum, which is only a
    range normalisation when the minimum is zero, so numeric and ordinal
    columns are shifted to start at zero. Categorical columns are compared
    as strings.
    """
    cols = list(feature_types)
    unknown = {c: t for c, t in feature_types.items() if t not in FEATURE_TYPES}
    if unknown:
        raise ValueError(f"Unknown Gower type tag(s): {unknown}")

    prepared = pd.DataFrame(index=frame.index)
    cat_mask = []
    for c in cols:
        s = frame[c]
        if feature_types[c] in CATEGORICAL_TYPES:
            prepared[c] = s.astype(str).to_numpy(dtype=object)
            cat_mask.append(True)
        else:
            if isinstance(s.dtype, pd.CategoricalDtype):
                s = s.cat.codes
            x = pd.to_numeric(s).astype(float)
            prepared[c] = (x - x.min()).to_numpy()
            cat_mask.append(False)
    return prepared, np.array(cat_mask, dtype=bool)


def gower_distance(frame: pd.DataFrame, feature_types: Dict[str, str], tag: str = "") -> pd.DataFrame:
    """
    Pairwise Gower dissimilarity, equal weight per column.

    Numeric/ordinal columns contribute |xi - xj| / range, nominal/binary
    columns contribute 0 on a match and 1 otherwise.

    Args:
        frame: Complete-case mixed table indexed by respondent id
        feature_types: Ordered column -> type tag mapping
        tag: Track tag for messages

    Returns:
        Symmetric N x N DataFrame with zero diagonal and entries in [0, 1]
    """
    n = len(frame)
    if n == 0:
        return pd.DataFrame(np.zeros((0, 0)), index=frame.index, columns=frame.index)

    prepared, cat_mask = _gower_input(frame, feature_types)
    logger.info("[%s] Computing Gower matrix: %s rows, %d categorical + %d numeric columns",
                tag, f"{n:,}", int(cat_mask.sum()), int((~cat_mask).sum()))

    dist = np.asarray(gower.gower_matrix(prepared, cat_features=cat_mask), dtype=float)

    # float32 round-off inside gower; restore the exact guarantees
    dist = (dist + dist.T) / 2.0
    np.fill_diagonal(dist, 0.0)
    dist = np.clip(dist, 0.0, 1.0)

    return pd.DataFrame(dist, index=frame.index, columns=frame.index)


def count_distinct(dist: pd.DataFrame, tol: float = 0.0) -> int:
    """Number of distinct records implied by a dissimilarity matrix."""
    d = dist.to_numpy()
    n = d.shape[0]
    distinct = 0
    for i in range(n):
        if i == 0 or not (d[i, :i] <= tol).any():
            distinct += 1
    return distinct
