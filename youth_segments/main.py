# Main orchestration script - ties together the two segmentation tracks
import argparse
import logging
import sys
from datetime import datetime

from .config import (
    OUTPUT_DIR, SEED, N_CLUSTERS, KMEANS_N_INIT, KMEANS_MAX_ITER, PAM_MAX_ITER,
    media_track_config, risk_track_config,
)
from .data_loading import load_questionnaires, load_respondents
from .errors import SchemaError
from .pipeline import run_analysis
from .reporting import save_analysis_outputs

logger = logging.getLogger("youth_segments")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Segment youth respondents by media engagement and sexual-risk behaviour."
    )
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument("--csv", help="Cleaned, already merged respondent table.")
    src.add_argument("--questionnaires", nargs=2, metavar=("MALE_CSV", "FEMALE_CSV"),
                     help="Cleaned male and female questionnaire tables to merge.")
    parser.add_argument("--output-dir", default=OUTPUT_DIR, help="Directory for tables and figures.")
    parser.add_argument("--k-media", type=int, default=N_CLUSTERS, help="Clusters for the media track.")
    parser.add_argument("--k-risk", type=int, default=N_CLUSTERS, help="Clusters for the risk track.")
    parser.add_argument("--seed", type=int, default=SEED, help="Random seed for k-means restarts.")
    parser.add_argument("--n-init", type=int, default=KMEANS_N_INIT, help="K-means random restarts.")
    parser.add_argument("--kmeans-max-iter", type=int, default=KMEANS_MAX_ITER)
    parser.add_argument("--pam-max-iter", type=int, default=PAM_MAX_ITER)
    parser.add_argument("--sweep-k", action="store_true",
                        help="Also compute silhouette curves over a range of k (diagnostic).")
    parser.add_argument("--no-plots", action="store_true", help="Write tables only.")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    return parser


def run_comprehensive_analysis(args: argparse.Namespace):
    """Load respondents, run both tracks, reconcile and write outputs."""
    logger.info("=" * 60)
    logger.info("YOUTH MEDIA & SEXUAL-RISK SEGMENTATION")
    logger.info("=" * 60)
    logger.info("Analysis started at: %s", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    logger.info("Random seed: %d", args.seed)

    if args.csv:
        df = load_respondents(args.csv)
    else:
        df = load_questionnaires(*args.questionnaires)
    logger.info("Respondent table: %s rows, %d columns", f"{len(df):,}", df.shape[1])

    media_cfg = media_track_config(n_clusters=args.k_media, seed=args.seed,
                                   n_init=args.n_init, max_iter=args.kmeans_max_iter)
    risk_cfg = risk_track_config(n_clusters=args.k_risk, seed=args.seed,
                                 max_iter=args.pam_max_iter)

    analysis = run_analysis(df, media_cfg, risk_cfg, sweep_k=args.sweep_k)
    written = save_analysis_outputs(analysis, args.output_dir, len(df), plots=not args.no_plots)

    logger.info("=" * 60)
    logger.info("ANALYSIS COMPLETE: %d files in %s/", len(written), args.output_dir)
    for tag, err in analysis.errors.items():
        logger.info("Track '%s' failed: %s", tag, err)
    return analysis


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        analysis = run_comprehensive_analysis(args)
    except SchemaError as err:
        logger.error("Aborted before any computation: %s", err)
        return 2
    return 0 if not analysis.errors else 1


if __name__ == "__main__":
    sys.exit(main())
