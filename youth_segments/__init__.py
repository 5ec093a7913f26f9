# Youth Media & Sexual-Risk Segmentation
# Two-track clustering of youth respondents from a national household survey

"""
Youth segmentation analysis with modular structure:

- data_loading.py: Questionnaire merging, respondent ids and column typing
- features.py: Complete-case feature tables per track
- scaling.py: Z-score standardisation and PCA design matrices
- distance.py: Gower dissimilarity for mixed-type data
- partition.py: K-means and PAM partitioners
- labeling.py: Rank-based semantic cluster names and profiles
- projection.py: 2-D principal component projection
- crosstab.py: Sex x wealth breakdowns per cluster
- reconcile.py: Join of risk segments onto media segments
- pipeline.py: Per-track runner and two-track orchestration
- reporting.py: CSV tables, figures and text summary
- main.py: Command line entry point
"""

from .errors import (
    SegmentationError,
    SchemaError,
    DegenerateColumnError,
    InsufficientDataError,
    DataIntegrityError,
    ConvergenceError,
)
from .config import TrackConfig, LabelScheme, media_track_config, risk_track_config
from .pipeline import run_track, run_analysis, TrackResult, AnalysisResult

__version__ = "1.0.0"
__author__ = "Youth Survey Analytics Team"
