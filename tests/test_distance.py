import numpy as np
import pandas as pd
import pytest

from youth_segments.config import risk_track_config
from youth_segments.distance import count_distinct, gower_distance
from youth_segments.features import build_feature_table


def test_identical_records_have_zero_distance():
    frame = pd.DataFrame({"used_condom": [1, 1, 0], "age": [19.0, 19.0, 23.0]},
                         index=["r1", "r2", "r3"])
    d = gower_distance(frame, {"used_condom": "binary", "age": "numeric"})
    assert d.loc["r1", "r2"] == 0.0
    assert d.loc["r2", "r1"] == 0.0


def test_known_values():
    frame = pd.DataFrame({"x": [0.0, 5.0, 10.0], "flag": [0, 1, 1]}, index=["a", "b", "c"])
    d = gower_distance(frame, {"x": "numeric", "flag": "binary"})
    assert d.loc["a", "c"] == pytest.approx(1.0, abs=1e-6)
    assert d.loc["a", "b"] == pytest.approx(0.75, abs=1e-6)
    assert d.loc["b", "c"] == pytest.approx(0.25, abs=1e-6)


def test_negative_values_use_range():
    frame = pd.DataFrame({"x": [-10.0, 0.0, 10.0]})
    d = gower_distance(frame, {"x": "ordinal"})
    assert d.iloc[0, 2] == pytest.approx(1.0, abs=1e-6)
    assert d.iloc[0, 1] == pytest.approx(0.5, abs=1e-6)


def test_nominal_mismatch():
    frame = pd.DataFrame({"residence": ["Urban", "Rural", "Urban"]})
    d = gower_distance(frame, {"residence": "nominal"})
    assert d.iloc[0, 1] == 1.0
    assert d.iloc[0, 2] == 0.0


def test_matrix_properties_on_survey_table(respondents):
    table = build_feature_table(respondents, risk_track_config())
    d = gower_distance(table.frame, table.feature_types, "risk")
    values = d.to_numpy()

    assert values.shape == (table.n_rows, table.n_rows)
    assert list(d.index) == list(table.frame.index)
    np.testing.assert_array_equal(values, values.T)
    assert (np.diag(values) == 0.0).all()
    assert values.min() >= 0.0 and values.max() <= 1.0


def test_unknown_type_tag():
    with pytest.raises(ValueError):
        gower_distance(pd.DataFrame({"x": [1, 2]}), {"x": "interval"})


def test_count_distinct():
    d = pd.DataFrame([[0.0, 0.0, 0.4], [0.0, 0.0, 0.4], [0.4, 0.4, 0.0]])
    assert count_distinct(d) == 2
