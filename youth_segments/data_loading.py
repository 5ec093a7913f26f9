# Respondent table assembly: questionnaire merging, ids and column typing
import logging
from typing import Optional

import numpy as np
import pandas as pd

from .config import (
    ID_PARTS, ID_COL, MEDIA_FEATURES, RISK_FEATURES, NOMINAL,
    WEALTH_LEVELS, SEX_LEVELS,
)
from .errors import DataIntegrityError, SchemaError

logger = logging.getLogger(__name__)

# -------------------------- Lookup Tables --------------------------
SEX_NORMALIZE = {
    "male": "Male", "m": "Male", "1": "Male", "man": "Male",
    "female": "Female", "f": "Female", "2": "Female", "woman": "Female",
}

BINARY_INDICATORS = ["recent_sex", "condom_last_sex", "nonspousal_partner",
                     "computer_use", "mobile_phone"]

# -------------------------- Helper Functions --------------------------
def _id_part(s: pd.Series) -> pd.Series:
    """Render an id component without float artefacts (12.0 -> '12')."""
    num = pd.to_numeric(s, errors="coerce")
    if num.notna().all() and (num % 1 == 0).all():
        return num.astype("int64").astype(str)
    return s.astype(str).str.strip()


def build_respondent_id(df: pd.DataFrame) -> pd.Series:
    """Concatenate cluster, household and person numbers into one id."""
    missing = [c for c in ID_PARTS if c not in df.columns]
    if missing:
        raise SchemaError(missing, "respondent id")
    parts = [_id_part(df[c]) for c in ID_PARTS]
    rid = parts[0]
    for p in parts[1:]:
        rid = rid + "_" + p
    return rid.rename(ID_COL)


def normalize_sex(value) -> Optional[str]:
    """Map the questionnaire's sex codes onto 'Male'/'Female'."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    key = str(value).strip().lower()
    if key.endswith(".0"):
        key = key[:-2]
    return SEX_NORMALIZE.get(key, str(value).strip())


# -------------------------- Main Loading Functions --------------------------
def prepare_column_types(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce the cleaned columns to the dtypes the core expects.

    Numeric, ordinal and binary features become floats (missing stays NaN),
    nominal features become strings, sex is normalised and wealth quintile
    becomes an ordered categorical when its values are the standard labels.
    """
    df_typed = df.copy()

    type_tags = {**MEDIA_FEATURES, **RISK_FEATURES}
    for col, kind in type_tags.items():
        if col not in df_typed.columns:
            continue
        if kind == NOMINAL:
            df_typed[col] = df_typed[col].where(df_typed[col].isna(), df_typed[col].astype(str))
        else:
            df_typed[col] = pd.to_numeric(df_typed[col], errors="coerce")

    for col in BINARY_INDICATORS:
        if col in df_typed.columns:
            df_typed[col] = pd.to_numeric(df_typed[col], errors="coerce")

    if "sex" in df_typed.columns:
        df_typed["sex"] = df_typed["sex"].map(normalize_sex)
        if df_typed["sex"].dropna().isin(SEX_LEVELS).all():
            df_typed["sex"] = pd.Categorical(df_typed["sex"], categories=SEX_LEVELS)

    if "wealth_quintile" in df_typed.columns:
        wq = df_typed["wealth_quintile"]
        if wq.dropna().astype(str).isin(WEALTH_LEVELS).all():
            df_typed["wealth_quintile"] = pd.Categorical(
                wq.where(wq.isna(), wq.astype(str)), categories=WEALTH_LEVELS, ordered=True
            )

    return df_typed


def merge_questionnaires(df_male: pd.DataFrame, df_female: pd.DataFrame) -> pd.DataFrame:
    """
    Stack the cleaned male and female questionnaires into one respondent table.

    Adds ``sex`` where a questionnaire lacks it, builds ``respondent_id`` and
    rejects duplicate ids.
    """
    frames = []
    for frame, sex in ((df_male, "Male"), (df_female, "Female")):
        part = frame.copy()
        if "sex" not in part.columns:
            part["sex"] = sex
        frames.append(part)

    df = pd.concat(frames, ignore_index=True, sort=False)
    df[ID_COL] = build_respondent_id(df)

    dupes = df[ID_COL].duplicated()
    if dupes.any():
        examples = df.loc[dupes, ID_COL].head(5).tolist()
        raise DataIntegrityError(f"Duplicate respondent ids after merge: {examples}")

    logger.info("Merged %s male + %s female = %s respondents",
                f"{len(df_male):,}", f"{len(df_female):,}", f"{len(df):,}")
    return prepare_column_types(df)


def load_respondents(csv_path: str) -> pd.DataFrame:
    """Load an already merged respondent table from CSV."""
    logger.info("Loading respondents from %s", csv_path)
    df = pd.read_csv(csv_path, low_memory=False)
    if ID_COL not in df.columns:
        df[ID_COL] = build_respondent_id(df)
    logger.info("Raw data shape: %s", df.shape)
    return prepare_column_types(df)


def load_questionnaires(male_path: str, female_path: str) -> pd.DataFrame:
    """Load the two cleaned questionnaire CSVs and merge them."""
    logger.info("Loading questionnaires: %s, %s", male_path, female_path)
    df_male = pd.read_csv(male_path, low_memory=False)
    df_female = pd.read_csv(female_path, low_memory=False)
    return merge_questionnaires(df_male, df_female)
