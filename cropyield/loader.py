"""
Crop Yield Raw Data Loader
--------------------------
Centralized "Extract" step of the training pipeline. Reads the tabular crop
dataset and hands it to the preprocessing layer as Raw Rows.

Core Responsibilities:
1. Source Access: Reads the CSV file at the configured path.
2. Type Neutrality: Every cell is returned as a string. Parsing numbers is
   the Row Encoder's job so that training and inference share one code path.
3. Fail Fast: Any I/O or tokenizing failure surfaces as DataLoadError.
   There is no retry and no empty-dataset fallback.
"""

import logging
from typing import Dict, List

import pandas as pd

from .errors import DataLoadError

logger = logging.getLogger(__name__)

RawRow = Dict[str, str]


def load_raw_rows(path: str) -> List[RawRow]:
    """
    Loads the crop dataset as a list of string-valued rows.

    Args:
        path (str): Location of the CSV file (header row required).

    Returns:
        List[RawRow]: One mapping per data row, keys in header order.
        Empty cells are returned as empty strings so the Dataset Builder's
        validity filter can see them.

    Raises:
        DataLoadError: The file is missing, unreadable or not valid CSV.
    """
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.error(f"Failed to load dataset from {path}: {e}")
        raise DataLoadError(f"Could not read dataset '{path}': {e}") from e

    rows = df.to_dict(orient="records")
    logger.info(f"Loaded {len(rows)} raw rows ({len(df.columns)} columns) from {path}")
    return rows
