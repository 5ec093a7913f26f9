# Within-cluster percentage breakdowns by demographic strata
import logging
from typing import Dict, Sequence

import pandas as pd

from .config import ID_COL, STRATA
from .errors import SchemaError

logger = logging.getLogger(__name__)


def _levels(series: pd.Series) -> list:
    """Category order if the column has one, otherwise sorted observed values."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        return list(series.cat.categories)
    return sorted(series.dropna().unique().tolist(), key=str)


def demographic_crosstab(labels: pd.DataFrame, respondents: pd.DataFrame,
                         strata: Sequence[str] = STRATA) -> pd.DataFrame:
    """
    Percentage of each cluster's members in every strata combination.

    Percentages are rounded to one decimal, so a cluster's total can be off
    100 by a few tenths.

    Args:
        labels: respondent id -> cluster/label table
        respondents: Respondent table carrying respondent_id and the strata
        strata: Demographic columns to cross (sex x wealth quintile)

    Returns:
        Long table: cluster, label, <strata...>, n, pct
    """
    strata = list(strata)
    missing = [c for c in [ID_COL] + strata if c not in respondents.columns]
    if missing:
        raise SchemaError(missing, "demographic cross-tabulation")

    demo = respondents.set_index(ID_COL)[strata]
    joined = labels[["cluster", "label"]].join(demo, how="left")
    n_missing = int(joined[strata].isna().any(axis=1).sum())
    if n_missing:
        logger.warning("Cross-tab: %d clustered respondents lack %s and are left out",
                       n_missing, "/".join(strata))
    joined = joined.dropna(subset=strata)

    levels = [_levels(joined[c]) for c in strata]
    for c in strata:
        joined[c] = joined[c].astype(object)

    counts = joined.groupby(["cluster"] + strata).size()
    grid = pd.MultiIndex.from_product(
        [sorted(joined["cluster"].unique())] + levels,
        names=["cluster"] + strata,
    )
    counts = counts.reindex(grid, fill_value=0).rename("n").reset_index()

    totals = counts.groupby("cluster")["n"].transform("sum")
    counts["pct"] = (counts["n"] / totals * 100).round(1)

    label_map: Dict[int, str] = labels.drop_duplicates("cluster").set_index("cluster")["label"].to_dict()
    counts.insert(1, "label", counts["cluster"].map(label_map))
    return counts


def crosstab_wide(long_table: pd.DataFrame, strata: Sequence[str] = STRATA) -> pd.DataFrame:
    """Cluster-by-strata percentage grid for reporting."""
    return long_table.pivot_table(index="label", columns=list(strata), values="pct",
                                  aggfunc="sum", observed=False)
