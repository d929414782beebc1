"""
Schema Profiler
---------------
Derives the immutable SchemaProfile that fixes the feature layout of a
trained model: category vocabulary, the fitted min-max scaler for the numeric
columns and the ordered list of output feature names.

The profile is computed once per training run and then shared verbatim by
the Dataset Builder (training rows) and the Prediction Service (inference
rows). Refitting any part of it at inference time is a train/serve skew bug.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from sklearn.preprocessing import MinMaxScaler

from ..config import CATEGORICAL_COLUMN, NON_NUMERIC_COLUMNS, ONE_HOT_PREFIX, TARGET_COLUMN
from ..errors import EmptyDatasetError, EncodingError, EncodingFailure, MissingColumnError


@dataclass(frozen=True)
class SchemaProfile:
    """
    Training-derived description of the feature vector.

    Attributes:
        categories: Distinct Crop_Type values in first-seen order. This is the
            one-hot column order.
        numeric_columns: Numeric feature columns in dataset column order.
        numeric_ranges: Read-only mapping column -> (min, max) from training.
        feature_order: One-hot feature names followed by numeric column names.
        scaler: MinMaxScaler fitted on the training numeric block, columns in
            ``numeric_columns`` order. None when there are no numeric columns.
            Only ever used for ``transform`` after the profile is built.
    """
    categories: Tuple[str, ...]
    numeric_columns: Tuple[str, ...]
    numeric_ranges: Mapping[str, Tuple[float, float]]
    feature_order: Tuple[str, ...]
    scaler: Optional[MinMaxScaler] = field(default=None, compare=False, repr=False)

    @property
    def n_features(self) -> int:
        return len(self.feature_order)

    @property
    def input_columns(self) -> Tuple[str, ...]:
        """Raw columns an inference request must supply."""
        return (CATEGORICAL_COLUMN,) + self.numeric_columns

    @classmethod
    def create(cls,
               categories: Sequence[str],
               numeric_ranges: Mapping[str, Tuple[float, float]],
               scaler: Optional[MinMaxScaler] = None) -> "SchemaProfile":
        """
        Assembles a profile and derives its feature order.

        Without a fitted ``scaler`` one is fitted on the two-row block
        [mins, maxs], which yields the same data_min_/data_max_ as fitting on
        the full training data.
        """
        numeric_columns = tuple(numeric_ranges)
        if scaler is None and numeric_columns:
            bounds = np.array([[float(numeric_ranges[c][i]) for c in numeric_columns] for i in (0, 1)])
            scaler = MinMaxScaler().fit(bounds)
        feature_order = tuple(f"{ONE_HOT_PREFIX}{c}" for c in categories) + numeric_columns
        return cls(
            categories=tuple(categories),
            numeric_columns=numeric_columns,
            numeric_ranges=MappingProxyType(
                {col: (float(lo), float(hi)) for col, (lo, hi) in numeric_ranges.items()}
            ),
            feature_order=feature_order,
            scaler=scaler,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "categories": list(self.categories),
            "numeric_ranges": {c: list(r) for c, r in self.numeric_ranges.items()},
            "feature_order": list(self.feature_order),
        }


def normalize_category(value: object) -> str:
    return str(value).strip()


def parse_numeric(value: str, column: str) -> float:
    """Parses a raw cell into a finite float or raises EncodingError."""
    try:
        number = float(str(value).strip())
    except ValueError:
        raise EncodingError(EncodingFailure.INVALID_NUMERIC, column, value) from None
    if not math.isfinite(number):
        raise EncodingError(EncodingFailure.INVALID_NUMERIC, column, value)
    return number


def collect_columns(rows: Iterable[Mapping[str, str]]) -> List[str]:
    """Union of row keys, in first-seen order."""
    columns: Dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def require_columns(columns: Sequence[str]) -> None:
    for required in (CATEGORICAL_COLUMN, TARGET_COLUMN):
        if required not in columns:
            raise MissingColumnError(required)


def profile_schema(rows: Sequence[Mapping[str, str]],
                   columns: Sequence[str]) -> SchemaProfile:
    """
    Scans the valid training rows once and builds their SchemaProfile.

    Args:
        rows: Rows that already passed the validity filter.
        columns: Dataset columns in source order.

    Raises:
        MissingColumnError: Crop_Type or Yield is not among ``columns``.
        EmptyDatasetError: ``rows`` is empty.
        EncodingError: A numeric cell is not a finite number.
    """
    require_columns(columns)
    if not rows:
        raise EmptyDatasetError("Dataset has no valid rows to profile")

    categories: Dict[str, None] = {}
    for row in rows:
        categories.setdefault(normalize_category(row[CATEGORICAL_COLUMN]), None)

    numeric_columns = [c for c in columns if c not in NON_NUMERIC_COLUMNS]
    if not numeric_columns:
        return SchemaProfile.create(list(categories), {})

    X_raw = np.array(
        [[parse_numeric(row[col], col) for col in numeric_columns] for row in rows],
        dtype=np.float64,
    )
    # CRITICAL: The encoder must reuse this exact scaler for inference rows.
    scaler = MinMaxScaler()
    scaler.fit(X_raw)

    numeric_ranges = {
        col: (float(lo), float(hi))
        for col, lo, hi in zip(numeric_columns, scaler.data_min_, scaler.data_max_)
    }
    return SchemaProfile.create(list(categories), numeric_ranges, scaler=scaler)
