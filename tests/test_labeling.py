import pandas as pd
import pytest

from youth_segments.config import LabelScheme, MEDIA_LABELS, MEDIA_SCORE, media_track_config
from youth_segments.errors import SchemaError
from youth_segments.labeling import (
    cluster_scores, label_clusters, labelled_assignment, profile_clusters, respondent_scores,
)

SCHEME = LabelScheme(MEDIA_LABELS, dict(MEDIA_SCORE), "Media segment")


@pytest.fixture
def raw():
    # r1-r2 offline, r3-r4 some access, r5-r6 fully online
    return pd.DataFrame({
        "computer_use": [0, 0, 0, 1, 1, 1],
        "internet_use": [0, 0, 1, 1, 3, 3],
        "mobile_phone": [0, 0, 1, 1, 1, 1],
        "radio": [2, 1, 2, 2, 0, 1],
    }, index=[f"r{i}" for i in range(1, 7)])


def test_labels_follow_score_not_cluster_id(raw):
    run_a = pd.Series([1, 1, 2, 2, 3, 3], index=raw.index)
    run_b = pd.Series([3, 3, 1, 1, 2, 2], index=raw.index)

    names_a = labelled_assignment(run_a, label_clusters(run_a, raw, SCHEME))["label"]
    names_b = labelled_assignment(run_b, label_clusters(run_b, raw, SCHEME))["label"]

    pd.testing.assert_series_equal(names_a, names_b)
    assert names_a["r1"] == "Disconnected Younger Youth"
    assert names_a["r3"] == "Traditional Access"
    assert names_a["r6"] == "Digital Media Consumers"


def test_higher_score_gets_later_name(raw):
    assignment = pd.Series([2, 2, 1, 1, 1, 1], index=raw.index)
    scores = cluster_scores(assignment, raw, SCHEME)
    labels = label_clusters(assignment, raw, LabelScheme(("Low", "High"), dict(MEDIA_SCORE)))
    assert scores[1] > scores[2]
    assert labels == {1: "High", 2: "Low"}


def test_negative_sign_reverses_column():
    raw = pd.DataFrame({"condom_last_sex": [1, 1, 0, 0]}, index=list("abcd"))
    scores = respondent_scores(raw, {"condom_last_sex": -1})
    assert list(scores) == [0.0, 0.0, 1.0, 1.0]


def test_generic_names_when_k_differs(raw):
    assignment = pd.Series([1, 1, 1, 2, 2, 2], index=raw.index)
    labels = label_clusters(assignment, raw, media_track_config().label_scheme)
    assert labels == {1: "Media segment 1", 2: "Media segment 2"}


def test_missing_score_column(raw):
    assignment = pd.Series([1, 1, 2, 2, 3, 3], index=raw.index)
    with pytest.raises(SchemaError):
        label_clusters(assignment, raw.drop(columns=["internet_use"]), SCHEME)


def test_profiles(raw):
    assignment = pd.Series([1, 1, 2, 2, 3, 3], index=raw.index)
    labels = label_clusters(assignment, raw, SCHEME)
    profiles = profile_clusters(assignment, raw, labels, SCHEME)

    assert list(profiles["cluster"]) == [1, 2, 3]
    assert profiles["n_respondents"].sum() == 6
    assert profiles.loc[profiles["cluster"] == 3, "internet_use_mean"].item() == 3.0
    assert list(profiles["label"]) == list(MEDIA_LABELS)
