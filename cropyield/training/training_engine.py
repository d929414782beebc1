"""
Crop Yield Training Engine
--------------------------
Orchestrates the training lifecycle of the yield regressor and hands the
result to the Model Lifecycle Manager.

Workflow:
1. Data Ingestion (CSV loader)
2. Preprocessing (validity filter, SchemaProfile, one-hot + min-max encoding)
3. Regressor Training (dense Keras network)
4. Fit Diagnostics (MAE / RMSE / R2 on the training set)
5. Publication (atomic install into the ModelManager)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from ..config import TrainerConfig
from ..loader import load_raw_rows
from ..preprocessing.dataset_builder import TrainingSet, build_dataset
from ..serving.model_manager import ModelManager
from .architecture import build_regressor

logger = logging.getLogger(__name__)


class KerasPredictor:
    """
    Read-only wrapper around a trained Keras regressor.

    The predictor only accepts vectors of the width it was trained on, so it
    can never be fed features laid out by a different SchemaProfile.
    """

    def __init__(self, model: tf.keras.Model, input_dim: int):
        self.model = model
        self.input_dim = input_dim

    def predict(self, vector: np.ndarray) -> float:
        arr = np.asarray(vector, dtype=np.float32)
        if arr.shape != (self.input_dim,):
            raise ValueError(f"Expected feature vector of shape ({self.input_dim},), got {arr.shape}")
        out = self.model(arr[np.newaxis, :], training=False)
        return float(np.asarray(out).reshape(-1)[0])

    def predict_batch(self, features: np.ndarray) -> np.ndarray:
        return self.model.predict(np.asarray(features, dtype=np.float32), verbose=0).reshape(-1)


@dataclass(frozen=True)
class TrainingSummary:
    n_samples: int
    n_features: int
    epochs: int
    mae: float
    rmse: float
    r2: Optional[float]

    def to_dict(self):
        return {
            "n_samples": self.n_samples,
            "n_features": self.n_features,
            "epochs": self.epochs,
            "mae": round(self.mae, 4),
            "rmse": round(self.rmse, 4),
            "r2": None if self.r2 is None else round(self.r2, 4),
        }


def train_model(features: np.ndarray,
                targets: np.ndarray,
                config: TrainerConfig = TrainerConfig()) -> KerasPredictor:
    """
    Fits the yield regressor on an encoded feature matrix.

    Args:
        features (np.ndarray): Shape (n_samples, n_features).
        targets (np.ndarray): Shape (n_samples,), row-aligned with ``features``.
        config (TrainerConfig): Fixed hyperparameters (64/32 hidden units,
            Adam, MSE, 50 epochs, batch size 32 by default).

    Returns:
        KerasPredictor: Trained predictor bound to ``features.shape[1]``.
    """
    if len(features) != len(targets):
        raise ValueError(f"Feature/target length mismatch: {len(features)} != {len(targets)}")

    tf.keras.utils.set_random_seed(config.random_state)
    input_dim = features.shape[1]
    model = build_regressor(input_dim, config)

    logger.info(
        f"Training yield regressor (Epochs: {config.epochs}, Batch: {config.batch_size}, "
        f"Samples: {len(targets)}, Features: {input_dim})..."
    )
    model.fit(
        features.astype(np.float32),
        targets.astype(np.float32).reshape(-1, 1),
        epochs=config.epochs,
        batch_size=config.batch_size,
        verbose=config.verbose
    )
    return KerasPredictor(model, input_dim)


def evaluate_fit(predictor: KerasPredictor, training_set: TrainingSet, epochs: int) -> TrainingSummary:
    """Training-set diagnostics. R2 is undefined for a single sample or a constant target."""
    predicted = predictor.predict_batch(training_set.features)
    actual = training_set.targets
    r2 = None
    if len(actual) > 1 and np.ptp(actual) > 0:
        r2 = float(r2_score(actual, predicted))
    return TrainingSummary(
        n_samples=len(training_set),
        n_features=training_set.profile.n_features,
        epochs=epochs,
        mae=float(mean_absolute_error(actual, predicted)),
        rmse=math.sqrt(mean_squared_error(actual, predicted)),
        r2=r2,
    )


def run_training(data_path: str,
                 manager: ModelManager,
                 config: TrainerConfig = TrainerConfig()) -> TrainingSummary:
    """
    Executes load -> build -> train -> install.

    Any failure propagates before ``manager`` is touched, so a failed run
    never leaves a partially trained model visible. Calling this again on a
    Ready manager performs a full retrain and replaces the model atomically.

    Raises:
        DataLoadError, EmptyDatasetError, MissingColumnError, EncodingError
    """
    logger.info(f">>> Initializing training sequence from: {data_path}")

    raw_rows = load_raw_rows(data_path)
    training_set = build_dataset(raw_rows)
    predictor = train_model(training_set.features, training_set.targets, config)
    summary = evaluate_fit(predictor, training_set, config.epochs)

    manager.install(predictor, training_set.profile, summary)
    logger.info(
        f"Training Complete. MAE={summary.mae:.4f} RMSE={summary.rmse:.4f} "
        f"R2={summary.r2 if summary.r2 is None else round(summary.r2, 4)}"
    )
    return summary
