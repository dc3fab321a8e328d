from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Layer:
    name: str
    type: str
    output_shape: str
    params: int
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelData:
    name: str
    layers: tuple[Layer, ...]

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    @property
    def total_params(self) -> int:
        return sum(layer.params for layer in self.layers)

    def layer(self, name: str) -> Layer:
        for layer in self.layers:
            if layer.name == name:
                return layer
        raise KeyError(f"Unknown layer: {name}")


@dataclass(frozen=True)
class Dataset:
    name: str
    headers: list[str]
    rows: list[list[str]]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_ragged(self) -> bool:
        return any(len(r) != len(self.headers) for r in self.rows)
