# Principal component projection for cluster visualisation
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from .config import SEED

logger = logging.getLogger(__name__)


@dataclass
class Projection:
    coordinates: pd.DataFrame          # PC1, PC2 per respondent
    explained_variance_ratio: np.ndarray
    loadings: pd.DataFrame             # feature x component

    @property
    def explained_table(self) -> pd.DataFrame:
        ratio = self.explained_variance_ratio
        return pd.DataFrame({
            "component": [f"PC{i+1}" for i in range(len(ratio))],
            "explained_variance": ratio,
            "cumulative_variance": np.cumsum(ratio),
        })


def project_pca(standardized: pd.DataFrame, n_components: int = 2, tag: str = "") -> Projection:
    """
    Project a standardised matrix onto its leading principal components.

    Args:
        standardized: Z-scored features indexed by respondent id
        n_components: Components to keep (2 for the scatter plots)
        tag: Track tag for logging

    Returns:
        Projection with per-respondent coordinates and explained variance
    """
    n_rows, n_cols = standardized.shape
    if n_components > min(n_rows, n_cols):
        raise ValueError(
            f"[{tag}] Cannot keep {n_components} components from a {n_rows} x {n_cols} matrix"
        )

    pca = PCA(n_components=n_components, random_state=SEED)
    coords = pca.fit_transform(standardized.to_numpy(dtype=float))
    names = [f"PC{i+1}" for i in range(n_components)]

    ratio = np.asarray(pca.explained_variance_ratio_, dtype=float)
    logger.info("[%s] PCA: %s", tag,
                ", ".join(f"{n}={r*100:.1f}%" for n, r in zip(names, ratio)))

    return Projection(
        coordinates=pd.DataFrame(coords, index=standardized.index, columns=names),
        explained_variance_ratio=ratio,
        loadings=pd.DataFrame(pca.components_.T, index=standardized.columns, columns=names),
    )
