import numpy as np
import pandas as pd
import pytest

from youth_segments.config import WEALTH_LEVELS
from youth_segments.data_loading import build_respondent_id, prepare_column_types


def make_respondents(n: int = 90, seed: int = 0) -> pd.DataFrame:
    """Synthetic cleaned respondent table with realistic codings."""
    rng = np.random.default_rng(seed)
    idx = np.arange(n)
    df = pd.DataFrame({
        "cluster_id": idx // 3 + 1,
        "household_id": idx % 3 + 1,
        "person_id": 1,
        "age": rng.integers(15, 30, n),
        "sex": np.where(idx % 2 == 0, "Male", "Female"),
        "residence": rng.choice(["Urban", "Rural"], n),
        "wealth_quintile": rng.choice(WEALTH_LEVELS, n),
        "education": rng.integers(0, 4, n),
        "literacy": rng.integers(0, 3, n),
        "newspaper": rng.integers(0, 3, n),
        "radio": rng.integers(0, 3, n),
        "tv": rng.integers(0, 3, n),
        "computer_use": rng.integers(0, 2, n),
        "internet_use": rng.integers(0, 4, n).astype(float),
        "mobile_phone": rng.integers(0, 2, n),
        "recent_sex": (rng.random(n) < 0.6).astype(int),
        "condom_last_sex": rng.integers(0, 2, n).astype(float),
        "nonspousal_partner": rng.integers(0, 2, n).astype(float),
    })
    inactive = df["recent_sex"] == 0
    df.loc[inactive, ["condom_last_sex", "nonspousal_partner"]] = np.nan
    df.loc[[3, 10, 17], "internet_use"] = np.nan
    df["respondent_id"] = build_respondent_id(df)
    return prepare_column_types(df)


@pytest.fixture
def respondents():
    return make_respondents()


@pytest.fixture
def two_groups():
    """Five points near the origin and five near (10, 10)."""
    rng = np.random.default_rng(3)
    a = rng.normal(0.0, 0.5, size=(5, 2))
    b = rng.normal(10.0, 0.5, size=(5, 2))
    ids = [f"a{i}" for i in range(5)] + [f"b{i}" for i in range(5)]
    return pd.DataFrame(np.vstack([a, b]), index=ids, columns=["x", "y"])
