from __future__ import annotations

import json
from typing import Any

from h5inspector.forecast.schemas import (
    FORECAST_OUTPUT_SCHEMA,
    ByCity,
    ByDataset,
    ByTemperature,
    ForecastRequest,
)
from h5inspector.forecast.tools import TEMPERATURE_TOOL_NAME


SYSTEM_PROMPT = (
    "You are an AI data scientist specializing in energy consumption forecasting. "
    "Your predictions are fictional and illustrative. "
    "Reply with a single JSON object and nothing else."
)


def _fmt_temp(value: float) -> str:
    return f"{value:g}"


def _comfort_rules(band: tuple[float, float]) -> str:
    low, high = _fmt_temp(band[0]), _fmt_temp(band[1])
    return (
        f"The energy consumption is most efficient when the temperature is between {low}-{high}°C.\n"
        "- If the temperature is lower than this range, consumption should increase due to heating loads.\n"
        "- If the temperature is higher than this range, consumption should increase due to cooling loads.\n"
        "- Adjust the predicted kWh value based on how far the temperature is from this efficient range.\n"
    )


def _output_format(require_temperature: bool) -> str:
    fields = dict(FORECAST_OUTPUT_SCHEMA["required"])
    if require_temperature:
        fields.update(FORECAST_OUTPUT_SCHEMA["optional"])
    example: dict[str, Any] = {"predictedConsumption": 182.5, "analysis": "..."}
    if require_temperature:
        example["temperatureRange"] = [12, 22]
    return (
        f"Return JSON only, with exactly these fields: {json.dumps(fields)}.\n"
        f"Example shape: {json.dumps(example, ensure_ascii=False)}\n"
    )


def _common_tail(kwh_range: tuple[float, float]) -> str:
    return (
        "Provide a realistic but fictional prediction in kWh and a brief analysis. "
        "Mention factors like the day of the week, typical seasonal load, and how the temperature "
        "will influence consumption. Keep the analysis concise (2-3 sentences).\n"
        f"Generate a random but plausible kWh value between {_fmt_temp(kwh_range[0])} and {_fmt_temp(kwh_range[1])}.\n\n"
    )


def build_instruction(
    request: ForecastRequest,
    comfort_band: tuple[float, float],
    kwh_range: tuple[float, float] = (100, 300),
) -> str:
    header = f"You are simulating a prediction for the machine learning model '{request.model_name}'.\n\n"

    if isinstance(request, ByCity):
        body = (
            f"Your task is to predict the energy consumption for the city of {request.city} "
            f"on the date: {request.date}.\n\n"
            f"First, use the {TEMPERATURE_TOOL_NAME} tool to get the forecasted temperature range for this day, "
            "and echo that range back as temperatureRange.\n\n"
        )
        require_temperature = True
    elif isinstance(request, ByTemperature):
        low, high = request.temperature_range
        body = (
            f"Your task is to predict the energy consumption on the date: {request.date}, "
            f"for a day with temperatures between {_fmt_temp(low)}°C and {_fmt_temp(high)}°C.\n\n"
        )
        require_temperature = False
    elif isinstance(request, ByDataset):
        body = (
            f"The model was trained on the dataset '{request.dataset_name}'. "
            f"Your task is to predict the energy consumption on the date: {request.date}.\n\n"
        )
        require_temperature = False
    else:
        raise TypeError(f"Unsupported forecast request: {type(request).__name__}")

    return (
        header
        + body
        + _common_tail(kwh_range)
        + _comfort_rules(comfort_band)
        + "\n"
        + _output_format(require_temperature)
        + "\nRequest input (JSON):\n"
        + json.dumps(request.to_payload(), ensure_ascii=False)
    )
