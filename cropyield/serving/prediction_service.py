"""
Prediction Service
------------------
Framework-free core of ``POST /predict``: validates raw-domain inputs against
the live SchemaProfile, encodes them with the same Row Encoder used during
training and invokes the matching Predictor.

Callers always send raw values (``Crop_Type`` as a category string, numeric
columns as numbers or numeric strings), never pre-encoded vectors.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping

import numpy as np

from ..config import TARGET_COLUMN
from ..errors import ValidationError
from ..preprocessing.row_encoder import encode
from ..preprocessing.schema_profile import SchemaProfile
from .model_manager import ModelManager, ModelSnapshot


@dataclass(frozen=True)
class PreparedRequest:
    snapshot: ModelSnapshot
    vector: np.ndarray


def validate_inputs(inputs: Any, profile: SchemaProfile) -> Dict[str, str]:
    """
    Checks the request mapping against the training columns.

    Returns:
        Dict[str, str]: Raw row (all values as strings) in training column order.

    Raises:
        ValidationError: Not a mapping, missing/empty column, or unknown column.
    """
    if not isinstance(inputs, Mapping):
        raise ValidationError("'inputs' must be an object keyed by column name")

    expected = profile.input_columns
    missing = [c for c in expected
               if inputs.get(c) is None or str(inputs.get(c)).strip() == ""]
    if missing:
        raise ValidationError(f"Missing required input(s): {', '.join(missing)}")

    unexpected = [k for k in inputs if k not in expected and k != TARGET_COLUMN]
    if unexpected:
        raise ValidationError(f"Unknown input(s): {', '.join(map(str, unexpected))}")

    row = {}
    for col in expected:
        value = inputs[col]
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValidationError(f"Input '{col}' must be a string or a number")
        row[col] = str(value)
    return row


def prepare(inputs: Any, manager: ModelManager) -> PreparedRequest:
    """
    Captures one snapshot and encodes ``inputs`` with its profile.

    Raises:
        ModelNotReadyError, ValidationError, EncodingError
    """
    snapshot = manager.snapshot()
    row = validate_inputs(inputs, snapshot.profile)
    return PreparedRequest(snapshot=snapshot, vector=encode(row, snapshot.profile))


def format_yield(value: float) -> str:
    return f"{value:.2f}"


def predict(inputs: Any, manager: ModelManager) -> Dict[str, str]:
    """Synchronous end-to-end prediction: validate, encode, infer, format."""
    prepared = prepare(inputs, manager)
    value = prepared.snapshot.predictor.predict(prepared.vector)
    return {"predictedYield": format_yield(value)}
