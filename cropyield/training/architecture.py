"""
Crop Yield Neural Architecture
------------------------------
Defines the dense feed-forward regressor used to predict crop yield from an
encoded feature vector.

Input (N-dim) -> Dense(64, relu) -> Dense(32, relu) -> Dense(1, linear).
"""

import tensorflow as tf
from tensorflow.keras import layers, Model, optimizers

from ..config import TrainerConfig


def build_regressor(input_dim: int, config: TrainerConfig = TrainerConfig()) -> Model:
    """
    Constructs and compiles the yield regressor.

    Args:
        input_dim (int): Width of the feature vector, i.e.
            ``len(SchemaProfile.feature_order)``.
        config (TrainerConfig): Hidden layer sizes, activation, learning rate
            and loss.

    Returns:
        tf.keras.Model: Compiled model mapping (batch, input_dim) to (batch, 1).
            Compiled with Adam, mean squared error loss and MAE as metric.
    """
    input_layer = layers.Input(shape=(input_dim,), name="feature_input")
    x = input_layer

    for i, units in enumerate(config.hidden_units):
        x = layers.Dense(units, activation=config.activation, name=f"hidden_dense_{i}")(x)

    # Linear unit: yield is an unbounded continuous target
    output_layer = layers.Dense(1, name="yield_output")(x)

    model = Model(inputs=input_layer, outputs=output_layer, name="CropYield_Regressor")
    model.compile(
        optimizer=optimizers.Adam(learning_rate=config.learning_rate),
        loss=config.loss,
        metrics=['mae']
    )
    return model
