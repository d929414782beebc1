"""
Error taxonomy for the crop yield pipeline.

Every error carries a machine-readable ``kind`` (the class name) and a
human-readable message. Load and schema errors are fatal at startup;
request-level errors are mapped to 4xx/5xx responses by the API layer.
"""

from enum import Enum
from typing import Any, Dict, Optional


class CropYieldError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class DataLoadError(CropYieldError):
    """The raw dataset could not be read."""


class EmptyDatasetError(CropYieldError):
    """No valid rows remained after filtering."""


class MissingColumnError(CropYieldError):
    def __init__(self, column: str):
        super().__init__(f"Required column '{column}' is missing from the dataset")
        self.column = column


class EncodingFailure(str, Enum):
    INVALID_NUMERIC = "InvalidNumeric"
    MISSING_VALUE = "MissingValue"


class EncodingError(CropYieldError):
    """A row could not be turned into a feature vector."""

    def __init__(self, reason: EncodingFailure, column: str, value: Optional[str] = None):
        if reason is EncodingFailure.INVALID_NUMERIC:
            message = f"Column '{column}' expects a finite number, got {value!r}"
        else:
            message = f"Column '{column}' has no value"
        super().__init__(message)
        self.reason = reason
        self.column = column

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update({"reason": self.reason.value, "column": self.column})
        return payload


class ModelNotReadyError(CropYieldError):
    def __init__(self, message: str = "Model is not trained yet"):
        super().__init__(message)


class ValidationError(CropYieldError):
    """The prediction request does not match the training schema."""
