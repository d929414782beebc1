import numpy as np
import pytest

from cropyield.config import TrainerConfig
from cropyield.errors import DataLoadError, EmptyDatasetError
from cropyield.serving.model_manager import ModelManager
from cropyield.serving.prediction_service import predict
from cropyield.training.architecture import build_regressor
from cropyield.training.training_engine import KerasPredictor, run_training, train_model

FAST = TrainerConfig(epochs=2, batch_size=4)


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "crop_data.csv"
    path.write_text(
        "Crop_Type,Rainfall,Temperature,Yield\n"
        "Wheat,10,15,5\n"
        "Corn,20,25,8\n"
        "Rice,,30,6\n"
        "Rice,35,28,7\n"
    )
    return str(path)


def test_regressor_layout():
    model = build_regressor(5)
    dense_units = [layer.units for layer in model.layers if hasattr(layer, "units")]
    assert dense_units == [64, 32, 1]
    assert model.output_shape == (None, 1)


def test_train_model_returns_bound_predictor():
    features = np.random.default_rng(0).random((8, 3))
    targets = features.sum(axis=1)

    predictor = train_model(features, targets, FAST)

    assert isinstance(predictor, KerasPredictor)
    assert predictor.input_dim == 3
    assert np.isfinite(predictor.predict(features[0]))
    with pytest.raises(ValueError):
        predictor.predict(np.zeros(4))


def test_train_model_rejects_misaligned_inputs():
    with pytest.raises(ValueError):
        train_model(np.zeros((3, 2)), np.zeros(2), FAST)


def test_run_training_installs_model(csv_path):
    manager = ModelManager()

    summary = run_training(csv_path, manager, FAST)

    snapshot = manager.snapshot()
    assert snapshot.profile.categories == ("Wheat", "Corn", "Rice")
    assert snapshot.profile.numeric_ranges["Rainfall"] == (10.0, 35.0)
    assert summary.n_samples == 3
    assert summary.n_features == 5
    assert snapshot.summary is summary
    result = predict({"Crop_Type": "Corn", "Rainfall": "20", "Temperature": "25"}, manager)
    whole, decimals = result["predictedYield"].lstrip("-").split(".")
    assert whole.isdigit() and len(decimals) == 2


def test_retrain_bumps_version(csv_path):
    manager = ModelManager()
    run_training(csv_path, manager, FAST)
    run_training(csv_path, manager, FAST)
    assert manager.snapshot().version == 2


def test_failed_run_leaves_manager_untouched(tmp_path):
    manager = ModelManager()
    with pytest.raises(DataLoadError):
        run_training(str(tmp_path / "missing.csv"), manager, FAST)

    empty = tmp_path / "empty_rows.csv"
    empty.write_text("Crop_Type,Rainfall,Yield\nWheat,,5\n")
    with pytest.raises(EmptyDatasetError):
        run_training(str(empty), manager, FAST)
    assert not manager.is_ready
