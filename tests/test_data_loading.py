import pandas as pd
import pytest

from youth_segments.data_loading import (
    build_respondent_id, load_respondents, merge_questionnaires, normalize_sex,
)
from youth_segments.errors import DataIntegrityError, SchemaError


def _questionnaire(rows):
    return pd.DataFrame(rows, columns=["cluster_id", "household_id", "person_id", "age", "wealth_quintile"])


def test_respondent_id_from_composite_key():
    df = pd.DataFrame({"cluster_id": [12.0, 3], "household_id": [4, 10], "person_id": [2, 1]})
    assert list(build_respondent_id(df)) == ["12_4_2", "3_10_1"]


def test_respondent_id_requires_key_columns():
    with pytest.raises(SchemaError):
        build_respondent_id(pd.DataFrame({"cluster_id": [1], "household_id": [1]}))


def test_merge_questionnaires():
    male = _questionnaire([[1, 1, 1, 19, "Poorest"], [1, 2, 1, 22, "Richest"]])
    female = _questionnaire([[1, 1, 2, 17, "Middle"]])
    df = merge_questionnaires(male, female)

    assert list(df["respondent_id"]) == ["1_1_1", "1_2_1", "1_1_2"]
    assert list(df["sex"]) == ["Male", "Male", "Female"]
    assert df["wealth_quintile"].cat.ordered
    assert df["wealth_quintile"].cat.codes.tolist() == [0, 4, 2]


def test_merge_rejects_duplicate_ids():
    male = _questionnaire([[1, 1, 1, 19, "Poorest"]])
    female = _questionnaire([[1, 1, 1, 20, "Poorer"]])
    with pytest.raises(DataIntegrityError):
        merge_questionnaires(male, female)


@pytest.mark.parametrize("raw, expected", [("male", "Male"), ("F", "Female"), (1.0, "Male"), (2, "Female"), (None, None)])
def test_normalize_sex(raw, expected):
    assert normalize_sex(raw) == expected


def test_load_respondents_round_trip(tmp_path, respondents):
    path = tmp_path / "respondents.csv"
    respondents.to_csv(path, index=False)
    loaded = load_respondents(str(path))

    assert list(loaded["respondent_id"]) == list(respondents["respondent_id"])
    assert list(loaded["sex"].cat.categories) == ["Male", "Female"]
    assert loaded["internet_use"].isna().sum() == 3
