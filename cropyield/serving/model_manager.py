"""
Model Lifecycle Manager
-----------------------
Owns the single shared (Predictor, SchemaProfile) pair behind the API.

States:
    Untrained: no snapshot installed; every read raises ModelNotReadyError.
    Ready:     exactly one immutable ModelSnapshot is visible.

Publication is by replacement: a new snapshot is fully built, then swapped in
with a single reference assignment. Readers grab the reference once per
request and keep using that snapshot even if a retrain lands mid-request.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import numpy as np

from ..errors import ModelNotReadyError
from ..preprocessing.schema_profile import SchemaProfile

logger = logging.getLogger(__name__)


class Predictor(Protocol):
    input_dim: int

    def predict(self, vector: np.ndarray) -> float: ...


@dataclass(frozen=True)
class ModelSnapshot:
    predictor: Predictor
    profile: SchemaProfile
    summary: Optional[Any] = None
    version: int = 1
    trained_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ModelManager:

    def __init__(self):
        self._snapshot: Optional[ModelSnapshot] = None
        self._write_lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self._snapshot is not None

    @property
    def state(self) -> str:
        return "ready" if self.is_ready else "untrained"

    def snapshot(self) -> ModelSnapshot:
        """Returns the current snapshot or raises ModelNotReadyError."""
        current = self._snapshot
        if current is None:
            raise ModelNotReadyError()
        return current

    def peek(self) -> Optional[ModelSnapshot]:
        return self._snapshot

    def install(self, predictor: Predictor, profile: SchemaProfile, summary: Any = None) -> ModelSnapshot:
        """
        Atomically publishes a trained predictor together with its profile.

        Raises:
            ValueError: The predictor's input width does not match the profile.
        """
        if predictor.input_dim != profile.n_features:
            raise ValueError(
                f"Predictor expects {predictor.input_dim} features, "
                f"profile defines {profile.n_features}"
            )
        with self._write_lock:
            version = self._snapshot.version + 1 if self._snapshot else 1
            new_snapshot = ModelSnapshot(predictor=predictor, profile=profile,
                                         summary=summary, version=version)
            # Hot-swap the model in RAM
            self._snapshot = new_snapshot
        logger.info(f"Model v{version} installed ({profile.n_features} features)")
        return new_snapshot

    def clear(self) -> None:
        """Back to Untrained; used on application shutdown."""
        with self._write_lock:
            self._snapshot = None
