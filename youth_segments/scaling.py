# Z-score standardisation and numeric design matrices for PCA
import logging
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from .config import NOMINAL
from .errors import DegenerateColumnError, InsufficientDataError

logger = logging.getLogger(__name__)


def zero_variance_columns(frame: pd.DataFrame, tol: float = 1e-12) -> list:
    """Columns whose values are all the same over the rows present."""
    var = frame.var(axis=0, ddof=0)
    return [c for c in frame.columns if not np.isfinite(var[c]) or var[c] <= tol]


def standardize(frame: pd.DataFrame, tag: str = "") -> pd.DataFrame:
    """
    Replace every column by (value - mean) / sd over the rows present.

    StandardScaler quietly leaves zero-variance columns at scale 1, so those
    are rejected up front instead.

    Args:
        frame: Numeric matrix indexed by respondent id
        tag: Track tag for messages

    Returns:
        Standardised copy with the same index and columns
    """
    if frame.empty:
        raise InsufficientDataError(f"[{tag}] Nothing to standardise: empty feature matrix")

    degenerate = zero_variance_columns(frame)
    if degenerate:
        raise DegenerateColumnError(degenerate, tag)

    scaler = StandardScaler()
    values = scaler.fit_transform(frame.to_numpy(dtype=float))
    logger.debug("[%s] Standardised %d columns over %d rows", tag, frame.shape[1], frame.shape[0])
    return pd.DataFrame(values, index=frame.index, columns=frame.columns)


def encode_for_pca(frame: pd.DataFrame, feature_types: Dict[str, str]) -> pd.DataFrame:
    """
    Numeric design matrix for a mixed table.

    Numeric, ordinal and binary columns are used as numbers; nominal columns
    are one-hot encoded with the first level dropped.
    """
    num_cols = [c for c, t in feature_types.items() if t != NOMINAL]
    nom_cols = [c for c, t in feature_types.items() if t == NOMINAL]

    parts = []
    if num_cols:
        num = frame[num_cols].copy()
        for c in num_cols:
            if isinstance(num[c].dtype, pd.CategoricalDtype):
                num[c] = num[c].cat.codes
        parts.append(num.apply(pd.to_numeric).astype(float))
    if nom_cols:
        dummies = pd.get_dummies(frame[nom_cols].astype(str), prefix=nom_cols,
                                 drop_first=True, dtype=float)
        parts.append(dummies)

    design = pd.concat(parts, axis=1) if parts else pd.DataFrame(index=frame.index)
    return design
