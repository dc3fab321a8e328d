from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from h5inspector.errors import InvalidArgumentError, SchemaValidationError
from h5inspector.forecast.tools import parse_iso_date


@dataclass(frozen=True)
class ByCity:
    date: str
    model_name: str
    city: str

    variant = "by_city"

    def to_payload(self) -> dict[str, Any]:
        return {"date": self.date, "modelName": self.model_name, "city": self.city}


@dataclass(frozen=True)
class ByTemperature:
    date: str
    model_name: str
    temperature_range: tuple[float, float]

    variant = "by_temperature"

    def to_payload(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "modelName": self.model_name,
            "temperatureRange": list(self.temperature_range),
        }


@dataclass(frozen=True)
class ByDataset:
    date: str
    model_name: str
    dataset_name: str

    variant = "by_dataset"

    def to_payload(self) -> dict[str, Any]:
        return {"date": self.date, "modelName": self.model_name, "datasetName": self.dataset_name}


ForecastRequest = Union[ByCity, ByTemperature, ByDataset]


@dataclass(frozen=True)
class ForecastResult:
    predicted_consumption: float
    analysis: str
    temperature_range: Optional[tuple[float, float]] = None

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "predictedConsumption": self.predicted_consumption,
            "analysis": self.analysis,
        }
        if self.temperature_range is not None:
            out["temperatureRange"] = list(self.temperature_range)
        return out


FORECAST_OUTPUT_SCHEMA: dict[str, Any] = {
    "required": {
        "predictedConsumption": "number",
        "analysis": "string",
    },
    "optional": {
        "temperatureRange": "number[2]",
    },
}

VARIANT_FIELDS = ("city", "temperatureRange", "datasetName")


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _non_empty_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"'{key}' must be a non-empty string.")
    return value.strip()


def _temperature_pair(value: Any) -> tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2 or not all(_is_number(v) for v in value):
        raise InvalidArgumentError("'temperatureRange' must be exactly two numbers [min, max].")
    low, high = float(value[0]), float(value[1])
    if low > high:
        raise InvalidArgumentError("'temperatureRange' minimum must not exceed maximum.")
    return low, high


def build_forecast_request(payload: dict[str, Any]) -> ForecastRequest:
    """Turn a request mapping into its variant; raises before any external call."""
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Forecast request must be a mapping.")
    date = _non_empty_str(payload, "date")
    parse_iso_date(date)
    model_name = _non_empty_str(payload, "modelName")

    present = [k for k in VARIANT_FIELDS if payload.get(k) is not None]
    if len(present) != 1:
        raise InvalidArgumentError(
            "Forecast request needs exactly one of city, temperatureRange or datasetName; "
            f"got {present or 'none'}."
        )

    field_name = present[0]
    if field_name == "city":
        return ByCity(date=date, model_name=model_name, city=_non_empty_str(payload, "city"))
    if field_name == "temperatureRange":
        return ByTemperature(
            date=date,
            model_name=model_name,
            temperature_range=_temperature_pair(payload["temperatureRange"]),
        )
    return ByDataset(date=date, model_name=model_name, dataset_name=_non_empty_str(payload, "datasetName"))


def extract_json_object(text: str) -> dict[str, Any]:
    m = re.search(r"\{.*\}", text or "", flags=re.S)
    if not m:
        raise SchemaValidationError("Model response did not contain a JSON object.")
    try:
        payload = json.loads(m.group(0))
    except json.JSONDecodeError as exc:
        raise SchemaValidationError(f"Model response is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise SchemaValidationError("Model response must be a JSON object.")
    return payload


def validate_forecast_output(payload: dict[str, Any], require_temperature: bool = False) -> ForecastResult:
    if not isinstance(payload, dict):
        raise SchemaValidationError("Forecast output must be an object.")

    value = payload.get("predictedConsumption")
    if not _is_number(value):
        raise SchemaValidationError("Forecast output: predictedConsumption must be a finite number.")
    analysis = payload.get("analysis")
    if not isinstance(analysis, str):
        raise SchemaValidationError("Forecast output: analysis must be a string.")

    temp_range = None
    raw_range = payload.get("temperatureRange")
    if raw_range is None:
        if require_temperature:
            raise SchemaValidationError("Forecast output: missing temperatureRange.")
    else:
        if not isinstance(raw_range, list) or len(raw_range) != 2 or not all(_is_number(v) for v in raw_range):
            raise SchemaValidationError("Forecast output: temperatureRange must be exactly two finite numbers.")
        temp_range = (float(raw_range[0]), float(raw_range[1]))

    return ForecastResult(
        predicted_consumption=float(value),
        analysis=analysis.strip(),
        temperature_range=temp_range,
    )
