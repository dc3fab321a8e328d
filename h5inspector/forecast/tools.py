from __future__ import annotations

import json
import logging
import re
from typing import Any

import pandas as pd

from h5inspector.errors import InvalidArgumentError


LOGGER = logging.getLogger(__name__)

# YYYY-MM-DD, optionally followed by a time and a UTC offset.
ISO_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)


def parse_iso_date(value: Any) -> pd.Timestamp:
    if not isinstance(value, str) or not ISO_DATE_RE.match(value.strip()):
        raise InvalidArgumentError(f"Invalid date: {value!r}")
    ts = pd.to_datetime(value.strip(), format="ISO8601", errors="coerce")
    if pd.isna(ts):
        raise InvalidArgumentError(f"Invalid date: {value!r}")
    return ts


def estimate_temperature_range(city: str, date: str) -> tuple[int, int]:
    """Plausible [min, max] °C for a city/day, keyed off name length and day of month.

    Stand-in for a weather lookup: same inputs always give the same range.
    """
    day = parse_iso_date(date).day
    key = (len(city) + day) % 30
    if key < 10:
        low = -5 + key
        high = low + 10
    elif key < 20:
        low = 10 + (key - 10)
        high = low + 10
    else:
        low = 25 + (key - 20)
        high = low + 12
    return low, high


def tool_get_temperature_for_city(city: str, date: str) -> dict[str, Any]:
    low, high = estimate_temperature_range(city, date)
    return {"temperatureRange": [low, high]}


TEMPERATURE_TOOL_NAME = "getTemperatureForCity"

TEMPERATURE_TOOL_SPEC: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TEMPERATURE_TOOL_NAME,
        "description": "Gets the forecasted temperature range for a given city and date.",
        "parameters": {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "City name."},
                "date": {"type": "string", "description": "Date in ISO format."},
            },
            "required": ["city", "date"],
        },
    },
}

ALLOWED_TOOLS = {
    TEMPERATURE_TOOL_NAME: tool_get_temperature_for_city,
}


def execute_tool(tool_name: str, args: dict[str, Any]) -> dict[str, Any]:
    if tool_name not in ALLOWED_TOOLS:
        raise ValueError(f"Unsupported tool: {tool_name}")
    city = args.get("city")
    date = args.get("date")
    if not isinstance(city, str) or not isinstance(date, str):
        raise InvalidArgumentError(f"{tool_name} expects string 'city' and 'date' arguments.")
    return ALLOWED_TOOLS[tool_name](city=city, date=date)


def run_tool_call(tool_name: str, raw_arguments: str | None) -> str:
    """Execute one model-issued tool call and return the JSON content sent back.

    Bad calls are reported to the model as an error payload so it can recover.
    """
    try:
        args = json.loads(raw_arguments or "{}")
        if not isinstance(args, dict):
            raise InvalidArgumentError("Tool arguments must be a JSON object.")
        result = execute_tool(tool_name, args)
    except (ValueError, TypeError) as exc:
        LOGGER.warning("Tool call %s rejected: %s", tool_name, exc)
        return json.dumps({"error": str(exc)})
    LOGGER.info("Tool %s(%s) -> %s", tool_name, raw_arguments, result)
    return json.dumps(result)
