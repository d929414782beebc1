"""
Row Encoder
-----------
Pure function turning one Raw Row into a Feature Vector under a given
SchemaProfile. The same function encodes training rows and inference rows.

Vector layout (see SchemaProfile.feature_order):
    [one-hot Crop_Type block, in profile.categories order]
    [min-max normalized numeric columns, in profile.numeric_columns order]

Policies:
    - Category text is compared after stripping surrounding whitespace.
    - Unknown category: the whole one-hot block is 0.0. The vocabulary is
      never expanded after training.
    - Zero-range column (min == max): always 0.0, never NaN or inf.
    - Values outside the training range are not clipped.
"""

from typing import Mapping

import numpy as np

from ..config import CATEGORICAL_COLUMN
from ..errors import EncodingError, EncodingFailure
from .schema_profile import SchemaProfile, normalize_category, parse_numeric


def scale_numeric(raw: np.ndarray, profile: SchemaProfile) -> np.ndarray:
    """
    Min-max scales one row of numeric values with the profile's fitted scaler.

    MinMaxScaler maps a zero-range column to ``x - min``; those columns are
    forced to 0.0. Values inside the training range are kept in [0, 1], since
    float rounding can push the training max a ulp past 1.0.
    """
    scaler = profile.scaler
    scaled = scaler.transform(raw[np.newaxis, :])[0]
    inside = (raw >= scaler.data_min_) & (raw <= scaler.data_max_)
    scaled = np.where(inside, np.clip(scaled, 0.0, 1.0), scaled)
    scaled[scaler.data_range_ == 0] = 0.0
    return scaled


def encode(row: Mapping[str, str], profile: SchemaProfile) -> np.ndarray:
    """
    Encodes a raw row into a float64 vector of length profile.n_features.

    Extra keys in ``row`` (e.g. the Yield target) are ignored.

    Raises:
        EncodingError: MISSING_VALUE if a required column is absent,
            INVALID_NUMERIC if a numeric cell does not parse to a finite float.
        ValueError: The produced vector does not match the profile width.
    """
    if CATEGORICAL_COLUMN not in row:
        raise EncodingError(EncodingFailure.MISSING_VALUE, CATEGORICAL_COLUMN)
    category = normalize_category(row[CATEGORICAL_COLUMN])

    one_hot = np.array([1.0 if category == known else 0.0 for known in profile.categories],
                       dtype=np.float64)

    raw = np.empty(len(profile.numeric_columns), dtype=np.float64)
    for j, col in enumerate(profile.numeric_columns):
        if col not in row:
            raise EncodingError(EncodingFailure.MISSING_VALUE, col)
        raw[j] = parse_numeric(row[col], col)
    numeric = scale_numeric(raw, profile) if len(raw) else raw

    vector = np.concatenate([one_hot, numeric]).astype(np.float64)
    if vector.shape != (profile.n_features,):
        raise ValueError(
            f"Encoded vector has shape {vector.shape}, profile defines {profile.n_features} features"
        )
    return vector
