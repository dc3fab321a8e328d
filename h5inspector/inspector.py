"""Model inspection backed by a fixed demo catalogue.

The uploaded file only gates a simulated load; its bytes are never read and
every accepted file shows the same seven-layer network under its own name.
"""
from __future__ import annotations

import copy
import json
import logging
import time

import pyperclip

from h5inspector.errors import ClipboardError
from h5inspector.types import Layer, ModelData
from h5inspector.uploads import check_extension


LOGGER = logging.getLogger(__name__)
MODEL_SUFFIX = ".h5"
DEMO_MODEL_NAME = "sequential_model.h5"

DEMO_LAYERS: tuple[Layer, ...] = (
    Layer(
        name="conv2d_input",
        type="InputLayer",
        output_shape="[(None, 28, 28, 1)]",
        params=0,
        config={
            "batch_input_shape": [None, 28, 28, 1],
            "dtype": "float32",
            "sparse": False,
            "ragged": False,
            "name": "conv2d_input",
        },
    ),
    Layer(
        name="conv2d",
        type="Conv2D",
        output_shape="(None, 26, 26, 32)",
        params=320,
        config={
            "name": "conv2d",
            "trainable": True,
            "dtype": "float32",
            "filters": 32,
            "kernel_size": [3, 3],
            "strides": [1, 1],
            "padding": "valid",
            "data_format": "channels_last",
            "dilation_rate": [1, 1],
            "groups": 1,
            "activation": "relu",
        },
    ),
    Layer(
        name="max_pooling2d",
        type="MaxPooling2D",
        output_shape="(None, 13, 13, 32)",
        params=0,
        config={
            "name": "max_pooling2d",
            "trainable": True,
            "dtype": "float32",
            "pool_size": [2, 2],
            "padding": "valid",
            "strides": [2, 2],
            "data_format": "channels_last",
        },
    ),
    Layer(
        name="flatten",
        type="Flatten",
        output_shape="(None, 5408)",
        params=0,
        config={"name": "flatten", "trainable": True, "dtype": "float32", "data_format": "channels_last"},
    ),
    Layer(
        name="dense",
        type="Dense",
        output_shape="(None, 128)",
        params=692352,
        config={
            "name": "dense",
            "trainable": True,
            "dtype": "float32",
            "units": 128,
            "activation": "relu",
            "use_bias": True,
        },
    ),
    Layer(
        name="dropout",
        type="Dropout",
        output_shape="(None, 128)",
        params=0,
        config={
            "name": "dropout",
            "trainable": True,
            "dtype": "float32",
            "rate": 0.5,
            "noise_shape": None,
            "seed": None,
        },
    ),
    Layer(
        name="dense_1",
        type="Dense",
        output_shape="(None, 10)",
        params=1290,
        config={
            "name": "dense_1",
            "trainable": True,
            "dtype": "float32",
            "units": 10,
            "activation": "softmax",
            "use_bias": True,
        },
    ),
)


def demo_model(name: str = DEMO_MODEL_NAME) -> ModelData:
    layers = tuple(
        Layer(
            name=layer.name,
            type=layer.type,
            output_shape=layer.output_shape,
            params=layer.params,
            config=copy.deepcopy(layer.config),
        )
        for layer in DEMO_LAYERS
    )
    return ModelData(name=name, layers=layers)


def load_model(filename: str, delay_seconds: float = 1.5) -> ModelData:
    check_extension(filename, MODEL_SUFFIX, "model")
    LOGGER.info("Simulating inspection of %s (%.1fs)", filename, delay_seconds)
    if delay_seconds > 0:
        time.sleep(delay_seconds)
    return demo_model(filename)


def format_config(layer: Layer) -> str:
    return json.dumps(layer.config, indent=2, ensure_ascii=False)


def copy_config(layer: Layer) -> str:
    """Put the layer config on the clipboard of the host running the app, not the browser's."""
    text = format_config(layer)
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        LOGGER.warning("Clipboard copy failed for layer %s: %s", layer.name, exc)
        raise ClipboardError(f"Could not copy the configuration for layer '{layer.name}'.") from exc
    return text
