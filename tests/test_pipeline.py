import os

import numpy as np
import pandas as pd
import pytest

from youth_segments.config import (
    MEDIA_LABELS, RISK_LABELS, UNKNOWN_LABEL, media_track_config, risk_track_config,
)
from youth_segments.errors import DegenerateColumnError, InsufficientDataError, SchemaError
from youth_segments.pipeline import run_analysis, run_track
from youth_segments.reporting import save_analysis_outputs


def test_both_tracks_and_reconciliation(respondents):
    analysis = run_analysis(respondents)
    media, risk = analysis.tracks["media"], analysis.tracks["risk"]

    assert not analysis.errors
    assert set(media.assignments["label"]) == set(MEDIA_LABELS)
    assert set(risk.assignments["label"]) == set(RISK_LABELS)
    assert media.projection.coordinates.index.equals(media.features.frame.index)
    assert risk.projection.coordinates.index.equals(risk.features.frame.index)

    rec = analysis.reconciled
    assert len(rec) == len(risk.assignments)
    assert rec["respondent_id"].is_unique
    both = rec[rec["respondent_id"].isin(media.assignments.index)]
    expected = media.assignments.loc[both["respondent_id"], "label"].tolist()
    assert both["media_label"].tolist() == expected
    assert (rec.loc[~rec["respondent_id"].isin(media.assignments.index), "media_label"] == UNKNOWN_LABEL).all()


def test_track_is_reproducible(respondents):
    cfg = media_track_config(n_init=10)
    first = run_track(respondents, cfg)
    second = run_track(respondents, cfg)
    pd.testing.assert_frame_equal(first.assignments, second.assignments)


def test_media_failure_does_not_stop_risk_track(respondents):
    df = respondents.copy()
    df["newspaper"] = 1.0

    analysis = run_analysis(df)

    assert analysis.tracks["media"] is None
    assert isinstance(analysis.errors["media"], DegenerateColumnError)
    assert analysis.errors["media"].stage == "standardize"
    assert analysis.tracks["risk"] is not None
    assert (analysis.reconciled["media_label"] == UNKNOWN_LABEL).all()


def test_media_without_complete_cases_does_not_stop_risk_track(respondents, caplog):
    df = respondents.copy()
    df["newspaper"] = np.nan

    with caplog.at_level("INFO"):
        analysis = run_analysis(df)

    assert analysis.tracks["media"] is None
    assert isinstance(analysis.errors["media"], InsufficientDataError)
    assert analysis.errors["media"].stage == "features"
    assert analysis.tracks["risk"] is not None
    assert len(analysis.reconciled) == len(analysis.tracks["risk"].assignments)
    assert (analysis.reconciled["media_label"] == UNKNOWN_LABEL).all()

    # one ERROR record for the failing stage, the abort itself is informational
    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 1
    assert errors[0].stage == "features"


def test_schema_error_aborts_run(respondents):
    with pytest.raises(SchemaError):
        run_analysis(respondents.drop(columns=["condom_last_sex"]))


def test_unconverged_kmeans_still_publishes(respondents, caplog):
    cfg = media_track_config(n_init=2, max_iter=1)
    with caplog.at_level("WARNING"):
        res = run_track(respondents, cfg)
    assert not res.partition.converged
    assert res.assignments["label"].notna().all()
    assert any("best assignment" in r.getMessage() for r in caplog.records)


def test_configurable_k(respondents):
    res = run_track(respondents, risk_track_config(n_clusters=2))
    assert res.partition.k == 2
    assert set(res.assignments["label"]) == {"Risk segment 1", "Risk segment 2"}
    assert res.crosstab["cluster"].nunique() == 2


def test_outputs_written(tmp_path, respondents):
    analysis = run_analysis(respondents, sweep_k=True)
    written = save_analysis_outputs(analysis, str(tmp_path), len(respondents))

    names = {os.path.basename(p) for p in written}
    for tag in ("media", "risk"):
        assert f"{tag}_assignments.csv" in names
        assert f"{tag}_pca_coordinates.csv" in names
        assert f"{tag}_demographic_crosstab.csv" in names
        assert f"{tag}_pca_scatter.png" in names
        assert f"{tag}_silhouette.png" in names
    assert "reconciled_segments.csv" in names
    summary = (tmp_path / "ANALYSIS_SUMMARY.txt").read_text(encoding="utf-8")
    assert "unweighted" in summary

    pca = pd.read_csv(tmp_path / "media_pca_coordinates.csv")
    assert list(pca.columns) == ["respondent_id", "PC1", "PC2", "cluster", "label"]
