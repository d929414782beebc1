"""
Dataset Builder
---------------
Turns the loaded Raw Rows into the training set consumed by the Trainer.

Workflow:
1. Column discovery and contract check (Crop_Type / Yield present).
2. Validity filter: drop rows with any missing or empty field.
3. Schema profiling on the surviving rows.
4. Encoding of every surviving row, in source order, plus Yield parsing.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Sequence

import numpy as np

from ..config import TARGET_COLUMN
from ..errors import EmptyDatasetError
from .row_encoder import encode
from .schema_profile import (SchemaProfile, collect_columns, parse_numeric,
                             profile_schema, require_columns)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingSet:
    features: np.ndarray  # (n_rows, n_features)
    targets: np.ndarray   # (n_rows,)
    profile: SchemaProfile

    def __len__(self) -> int:
        return len(self.targets)


def is_complete(row: Mapping[str, str], columns: Sequence[str]) -> bool:
    """A row is valid iff every column is present and non-empty."""
    for col in columns:
        value = row.get(col)
        if value is None or str(value).strip() == "":
            return False
    return True


def build_dataset(raw_rows: Sequence[Mapping[str, str]]) -> TrainingSet:
    """
    Builds the feature matrix, target vector and SchemaProfile.

    Row ``i`` of ``features`` and element ``i`` of ``targets`` always come from
    the same source row.

    Raises:
        EmptyDatasetError: No rows, or no row survived the validity filter.
        MissingColumnError: Crop_Type or Yield absent.
        EncodingError: A complete-looking row holds non-numeric garbage.
    """
    if not raw_rows:
        raise EmptyDatasetError("Dataset contains no rows")

    columns = collect_columns(raw_rows)
    require_columns(columns)

    valid_rows: List[Mapping[str, str]] = [r for r in raw_rows if is_complete(r, columns)]
    dropped = len(raw_rows) - len(valid_rows)
    if dropped:
        logger.warning(f"Validity filter dropped {dropped}/{len(raw_rows)} incomplete rows")

    profile = profile_schema(valid_rows, columns)

    features = np.empty((len(valid_rows), profile.n_features), dtype=np.float64)
    targets = np.empty(len(valid_rows), dtype=np.float64)
    for i, row in enumerate(valid_rows):
        features[i] = encode(row, profile)
        targets[i] = parse_numeric(row[TARGET_COLUMN], TARGET_COLUMN)

    logger.info(
        f"Training set ready: {len(valid_rows)} rows x {profile.n_features} features "
        f"({len(profile.categories)} crop types)"
    )
    return TrainingSet(features=features, targets=targets, profile=profile)
