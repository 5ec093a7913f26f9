# Hand-off tables, figures and text summary for the reporting collaborators
import os
import logging
from datetime import datetime
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from .config import DPI, ID_COL
from .crosstab import crosstab_wide
from .pipeline import AnalysisResult, TrackResult

logger = logging.getLogger(__name__)


def plot_pca_clusters(result: TrackResult, path: str):
    """Scatter plot of respondents in PCA space, coloured by segment."""
    table = result.pca_table()
    ratio = result.projection.explained_variance_ratio

    plt.figure(figsize=(10, 6))
    sns.scatterplot(data=table, x="PC1", y="PC2", hue="label", s=12, palette="tab10", linewidth=0)
    plt.title(f"{result.tag}: PCA - {result.config.method} k={result.partition.k}")
    plt.xlabel(f"PC1 ({ratio[0]*100:.1f}%)")
    plt.ylabel(f"PC2 ({ratio[1]*100:.1f}%)")
    plt.legend(title="Segment", fontsize=8)
    plt.tight_layout()
    plt.savefig(path, dpi=DPI)
    plt.close()


def plot_crosstab_heatmap(result: TrackResult, path: str):
    """Segment x (sex, wealth) percentage heat map."""
    wide = crosstab_wide(result.crosstab, result.config.strata)
    plt.figure(figsize=(12, 4 + 0.4 * len(wide)))
    sns.heatmap(wide, annot=True, fmt=".1f", cmap="YlOrRd", cbar_kws={"label": "% of segment"})
    plt.title(f"{result.tag}: segment composition by {' x '.join(result.config.strata)}")
    plt.tight_layout()
    plt.savefig(path, dpi=DPI)
    plt.close()


def plot_silhouette_curve(result: TrackResult, path: str):
    """Plot silhouette scores by k value."""
    curve = result.silhouette_curve
    pd.DataFrame(curve, columns=["k", "silhouette"]).to_csv(path.replace(".png", ".csv"), index=False)

    plt.figure(figsize=(7, 4))
    plt.plot([k for k, _ in curve], [s for _, s in curve], marker="o")
    plt.axvline(result.partition.k, color="grey", linestyle="--", alpha=0.6)
    plt.xlabel("Number of Clusters (k)")
    plt.ylabel("Silhouette Score")
    plt.title(f"{result.tag}: Silhouette by k")
    plt.grid(alpha=0.3)
    plt.tight_layout()
    plt.savefig(path, dpi=DPI)
    plt.close()


def save_track_outputs(result: TrackResult, output_dir: str, plots: bool = True) -> List[str]:
    """Write one track's tables (and figures) and return the paths written."""
    tag = result.tag
    os.makedirs(output_dir, exist_ok=True)
    written = []

    def _csv(frame: pd.DataFrame, name: str, index: bool = False):
        path = os.path.join(output_dir, f"{tag}_{name}.csv")
        frame.to_csv(path, index=index)
        written.append(path)

    _csv(result.assignments.rename_axis(ID_COL).reset_index(), "assignments")
    _csv(result.pca_table().rename_axis(ID_COL).reset_index(), "pca_coordinates")
    _csv(result.projection.explained_table, "pca_explained_variance")
    _csv(result.crosstab, "demographic_crosstab")
    _csv(result.profiles, "cluster_profiles")

    if plots:
        for name, plot in (("pca_scatter", plot_pca_clusters), ("crosstab_heatmap", plot_crosstab_heatmap)):
            path = os.path.join(output_dir, f"{tag}_{name}.png")
            plot(result, path)
            written.append(path)
        if result.silhouette_curve:
            path = os.path.join(output_dir, f"{tag}_silhouette.png")
            plot_silhouette_curve(result, path)
            written.append(path)

    logger.info("[%s] Wrote %d output files to %s", tag, len(written), output_dir)
    return written


def create_summary_report(analysis: AnalysisResult, n_respondents: int) -> str:
    """Plain-text summary of both tracks and the reconciliation."""
    lines = []
    lines.append("# Youth Media & Sexual-Risk Segmentation Summary")
    lines.append("=" * 70)
    lines.append("")
    lines.append(f"Analysis Date: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    lines.append(f"Respondents in merged table: {n_respondents:,}")
    lines.append("Survey weights: not applied (unweighted segmentation)")
    lines.append("")

    for tag, res in analysis.tracks.items():
        lines.append(f"## TRACK '{tag}'")
        if res is None:
            err = analysis.errors.get(tag)
            stage = getattr(err, "stage", "unknown")
            lines.append(f"- FAILED at stage '{stage}': {err}")
            lines.append("")
            continue
        cfg = res.config
        lines.append(f"- Method: {cfg.method}, k={cfg.n_clusters}, seed={cfg.seed}")
        lines.append(f"- Respondents clustered: {res.features.n_rows:,} (complete cases)")
        lines.append(f"- Features: {', '.join(cfg.features)}")
        lines.append(f"- Objective: {res.partition.objective:.4f}; iterations: {res.partition.n_iter}"
                     f"{'' if res.partition.converged else ' (NOT converged)'}")
        lines.append(f"- Silhouette: {res.silhouette:.4f}")
        ratio = res.projection.explained_variance_ratio
        lines.append(f"- PCA variance explained: PC1 {ratio[0]*100:.1f}%, PC2 {ratio[1]*100:.1f}%")
        lines.append("- Segments:")
        for _, row in res.profiles.iterrows():
            lines.append(f"    Cluster {int(row['cluster'])} - {row['label']}: "
                         f"{int(row['n_respondents']):,} ({row['pct_respondents']}%), score {row['score']}")
        lines.append("")

    lines.append("## RECONCILIATION")
    if analysis.reconciled is None:
        lines.append("- Not available (risk track failed)")
    else:
        rec = analysis.reconciled
        lines.append(f"- Sexually-active respondents with a risk segment: {len(rec):,}")
        counts: Dict[str, int] = rec["media_label"].value_counts().to_dict()
        for label, n in counts.items():
            lines.append(f"    media segment {label}: {n:,}")
    lines.append("")
    return "\n".join(lines)


def save_analysis_outputs(analysis: AnalysisResult, output_dir: str, n_respondents: int,
                          plots: bool = True) -> List[str]:
    """Write every track's outputs, the reconciled table and the summary."""
    os.makedirs(output_dir, exist_ok=True)
    written = []
    for res in analysis.tracks.values():
        if res is not None:
            written.extend(save_track_outputs(res, output_dir, plots))

    if analysis.reconciled is not None:
        path = os.path.join(output_dir, "reconciled_segments.csv")
        analysis.reconciled.to_csv(path, index=False)
        written.append(path)
        path = os.path.join(output_dir, "reconciled_summary.csv")
        analysis.reconciled_summary.to_csv(path)
        written.append(path)

    path = os.path.join(output_dir, "ANALYSIS_SUMMARY.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write(create_summary_report(analysis, n_respondents))
    written.append(path)

    logger.info("Summary report created: %s", path)
    return written
