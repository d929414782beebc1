import numpy as np
import pytest

from cropyield.errors import EmptyDatasetError, EncodingError, MissingColumnError
from cropyield.preprocessing.dataset_builder import build_dataset, is_complete


def test_example_training_set(example_rows):
    training_set = build_dataset(example_rows)

    assert training_set.features.tolist() == [[1.0, 0.0, 0.0], [0.0, 1.0, 1.0]]
    assert training_set.targets.tolist() == [5.0, 8.0]
    assert training_set.profile.categories == ("Wheat", "Corn")


def test_incomplete_rows_are_filtered_and_alignment_kept(crop_rows):
    training_set = build_dataset(crop_rows)

    assert len(training_set) == 4
    assert training_set.features.shape == (4, training_set.profile.n_features)
    assert training_set.targets.tolist() == [4.1, 3.2, 5.0, 2.9]
    # Rainfall range ignores the dropped row
    assert training_set.profile.numeric_ranges["Rainfall"] == (60.0, 200.0)


def test_constant_column_is_all_zero(crop_rows):
    training_set = build_dataset(crop_rows)
    idx = training_set.profile.feature_order.index("Soil_pH")
    assert np.all(training_set.features[:, idx] == 0.0)


def test_row_missing_a_key_is_invalid():
    columns = ["Crop_Type", "Rainfall", "Yield"]
    assert not is_complete({"Crop_Type": "Rice", "Yield": "1"}, columns)
    assert not is_complete({"Crop_Type": "Rice", "Rainfall": "  ", "Yield": "1"}, columns)
    assert is_complete({"Crop_Type": "Rice", "Rainfall": "2", "Yield": "1"}, columns)


def test_all_rows_invalid_raises_empty():
    rows = [{"Crop_Type": "Rice", "Rainfall": "", "Yield": "1"}]
    with pytest.raises(EmptyDatasetError):
        build_dataset(rows)


def test_no_rows_raises_empty():
    with pytest.raises(EmptyDatasetError):
        build_dataset([])


def test_missing_target_column():
    with pytest.raises(MissingColumnError):
        build_dataset([{"Crop_Type": "Rice", "Rainfall": "1"}])


def test_garbage_target_is_an_encoding_error():
    rows = [{"Crop_Type": "Rice", "Rainfall": "1", "Yield": "n/a"}]
    with pytest.raises(EncodingError) as exc:
        build_dataset(rows)
    assert exc.value.column == "Yield"
