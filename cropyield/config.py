"""
Crop Yield Feature Registry & Settings
--------------------------------------
The authoritative "Source of Truth" for the column contract shared by the
offline training pipeline and the online prediction API.

System Role:
    1. Column Contract: Names the categorical column and the regression target
       every dataset must carry. All remaining columns are numeric features.
    2. Trainer Configuration: Fixed hyperparameters for the yield regressor.
    3. Runtime Settings: Paths and network options resolved from the
       environment (.env supported).

Critical Constraints:
    ! IMMUTABILITY: The one-hot prefix and column names are baked into every
      SchemaProfile. Changing them invalidates all running models.
    ! RETRAINING: Changing TrainerConfig only takes effect on the next
      full training run (process restart).
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

# --- COLUMN CONTRACT ---
# Categorical column expanded into one-hot features (first-seen order).
CATEGORICAL_COLUMN: str = "Crop_Type"

# Regression target. Never part of the feature vector.
TARGET_COLUMN: str = "Yield"

# One-hot feature names are rendered as f"{ONE_HOT_PREFIX}{category}".
ONE_HOT_PREFIX: str = f"{CATEGORICAL_COLUMN}_"

# Columns that are never treated as numeric features.
NON_NUMERIC_COLUMNS: Tuple[str, ...] = (CATEGORICAL_COLUMN, TARGET_COLUMN)


@dataclass(frozen=True)
class TrainerConfig:
    """Hyperparameters for the dense yield regressor.

    Two ReLU hidden layers (64 -> 32) feeding a single linear output unit,
    trained with Adam on mean squared error.
    """
    hidden_units: Tuple[int, ...] = (64, 32)
    activation: str = "relu"
    learning_rate: float = 0.001
    loss: str = "mse"
    epochs: int = 50
    batch_size: int = 32
    random_state: int = 42
    verbose: int = 0  # Set to 1 for debugging loss curves


@dataclass(frozen=True)
class Settings:
    data_path: str = "crop_data.csv"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    trainer: TrainerConfig = field(default_factory=TrainerConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Builds settings from environment variables, falling back to defaults."""
        return cls(
            data_path=os.getenv("CROP_DATA_PATH", cls.data_path),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            trainer=TrainerConfig(
                epochs=int(os.getenv("TRAIN_EPOCHS", str(TrainerConfig.epochs)))
            ),
        )
