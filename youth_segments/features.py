# Feature table assembly (complete-case) for both tracks
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

import pandas as pd

from .config import TrackConfig, ID_COL, FEATURE_TYPES, CATEGORICAL_TYPES
from .errors import DataIntegrityError, InsufficientDataError, SchemaError

logger = logging.getLogger(__name__)


@dataclass
class FeatureTable:
    """Complete-case features indexed by respondent id, with type tags."""
    frame: pd.DataFrame
    feature_types: Dict[str, str]

    @property
    def n_rows(self) -> int:
        return len(self.frame)

    @property
    def categorical_columns(self) -> List[str]:
        return [c for c, t in self.feature_types.items() if t in CATEGORICAL_TYPES]

    @property
    def numeric_columns(self) -> List[str]:
        return [c for c, t in self.feature_types.items() if t not in CATEGORICAL_TYPES]

    def numeric_frame(self) -> pd.DataFrame:
        """All columns as floats; nominal columns are not allowed here."""
        nominal = [c for c, t in self.feature_types.items() if t == "nominal"]
        if nominal:
            raise TypeError(f"Nominal columns cannot be used as numbers: {nominal}")
        return self.frame.apply(pd.to_numeric, errors="raise").astype(float)


def required_columns(config: TrackConfig) -> List[str]:
    return [ID_COL] + config.filter_columns + [c for c in config.features if c not in config.filter_columns]


def check_schema(columns: Iterable[str], config: TrackConfig) -> None:
    """Raise SchemaError if any column the track needs is absent."""
    bad_tags = {c: t for c, t in config.feature_types.items() if t not in FEATURE_TYPES}
    if bad_tags:
        raise ValueError(f"[{config.tag}] Unknown feature type tag(s): {bad_tags}")

    present = set(columns)
    missing = [c for c in required_columns(config) if c not in present]
    if missing:
        raise SchemaError(missing, f"track '{config.tag}'")


def apply_row_filter(df: pd.DataFrame, config: TrackConfig) -> pd.DataFrame:
    """Keep youth in the configured age band (and sexually active for Track 2)."""
    age = pd.to_numeric(df["age"], errors="coerce")
    mask = age.between(config.min_age, config.max_age)
    if config.sexually_active_only:
        mask &= pd.to_numeric(df["recent_sex"], errors="coerce").eq(1)
    return df.loc[mask]


def build_feature_table(df: pd.DataFrame, config: TrackConfig) -> FeatureTable:
    """
    Select the track's rows and features, dropping incomplete rows.

    Args:
        df: Cleaned respondent table (one row per respondent)
        config: Track configuration naming features and row filter

    Returns:
        FeatureTable with no missing cells, indexed by respondent id
    """
    check_schema(df.columns, config)

    df_rows = apply_row_filter(df, config)
    feats = config.features
    table = df_rows[[ID_COL] + feats].dropna(subset=feats)
    table = table.set_index(ID_COL)

    if table.index.duplicated().any():
        raise DataIntegrityError(f"[{config.tag}] Duplicate respondent ids in feature table")

    logger.info("[%s] %s of %s eligible respondents are complete cases (%s features)",
                config.tag, f"{len(table):,}", f"{len(df_rows):,}", len(feats))

    n_distinct = len(table.drop_duplicates())
    if n_distinct <= config.n_clusters:
        raise InsufficientDataError(
            f"[{config.tag}] {n_distinct} distinct complete-case records cannot form "
            f"{config.n_clusters} clusters"
        )

    return FeatureTable(frame=table, feature_types=dict(config.feature_types))
