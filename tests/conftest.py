import numpy as np
import pytest

from cropyield.preprocessing.schema_profile import SchemaProfile
from cropyield.serving.model_manager import ModelManager


class FakePredictor:
    """Deterministic stand-in for the Keras predictor: weighted sum of features."""

    def __init__(self, input_dim: int, offset: float = 0.0):
        self.input_dim = input_dim
        self.offset = offset
        self.calls = []

    def predict(self, vector: np.ndarray) -> float:
        self.calls.append(np.array(vector))
        weights = np.arange(1, self.input_dim + 1, dtype=np.float64)
        return float(np.dot(vector, weights) + self.offset)


@pytest.fixture
def example_rows():
    """The two-row Wheat/Corn dataset."""
    return [
        {"Crop_Type": "Wheat", "Rainfall": "10", "Yield": "5"},
        {"Crop_Type": "Corn", "Rainfall": "20", "Yield": "8"},
    ]


@pytest.fixture
def crop_rows():
    """A wider dataset with an incomplete row and a constant column."""
    return [
        {"Crop_Type": "Rice", "Rainfall": "200", "Temperature": "28", "Soil_pH": "6.5", "Yield": "4.1"},
        {"Crop_Type": "Wheat", "Rainfall": "80", "Temperature": "18", "Soil_pH": "6.5", "Yield": "3.2"},
        {"Crop_Type": "Rice", "Rainfall": "", "Temperature": "30", "Soil_pH": "6.5", "Yield": "4.4"},
        {"Crop_Type": "Maize", "Rainfall": "120", "Temperature": "24", "Soil_pH": "6.5", "Yield": "5.0"},
        {"Crop_Type": "Wheat", "Rainfall": "60", "Temperature": "16", "Soil_pH": "6.5", "Yield": "2.9"},
    ]


@pytest.fixture
def example_profile():
    return SchemaProfile.create(["Wheat", "Corn"], {"Rainfall": (10.0, 20.0)})


@pytest.fixture
def ready_manager(example_profile):
    manager = ModelManager()
    manager.install(FakePredictor(example_profile.n_features), example_profile)
    return manager
