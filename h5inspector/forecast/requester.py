from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from h5inspector.config import comfort_band, load_config
from h5inspector.errors import ExternalServiceError
from h5inspector.forecast.prompts import SYSTEM_PROMPT, build_instruction
from h5inspector.forecast.schemas import (
    ByCity,
    ForecastRequest,
    ForecastResult,
    build_forecast_request,
    extract_json_object,
    validate_forecast_output,
)
from h5inspector.forecast.tools import TEMPERATURE_TOOL_SPEC, run_tool_call
from h5inspector.llm.client import chat_completion


LOGGER = logging.getLogger(__name__)


def _assistant_tool_message(message: Any) -> dict[str, Any]:
    return {
        "role": "assistant",
        "content": message.content or "",
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in message.tool_calls
        ],
    }


def request_forecast(
    request: ForecastRequest | dict[str, Any],
    client: Any = None,
    cfg: Optional[Dict[str, Any]] = None,
) -> ForecastResult:
    """Ask the generative service for a fictional consumption forecast.

    One attempt per call. The city variant may answer tool calls for the
    temperature estimator before the final JSON arrives.
    """
    if isinstance(request, dict):
        request = build_forecast_request(request)
    cfg = cfg or load_config()
    llm_cfg = cfg.get("llm", {}) or {}
    fc_cfg = cfg.get("forecast", {}) or {}

    kwh_low, kwh_high = fc_cfg.get("kwh_range", [100, 300])
    instruction = build_instruction(
        request,
        comfort_band=comfort_band(cfg, request.variant),
        kwh_range=(float(kwh_low), float(kwh_high)),
    )
    use_tools = isinstance(request, ByCity)
    max_rounds = int(fc_cfg.get("max_tool_rounds", 4))

    messages: list[dict[str, Any]] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": instruction},
    ]
    LOGGER.info("Requesting %s forecast for model %s on %s", request.variant, request.model_name, request.date)

    for _ in range(max_rounds + 1):
        message = chat_completion(
            messages,
            model=str(llm_cfg.get("model", "llama-3.3-70b-versatile")),
            temperature=float(llm_cfg.get("temperature", 0.7)),
            max_tokens=int(llm_cfg.get("max_tokens", 600)),
            tools=[TEMPERATURE_TOOL_SPEC] if use_tools else None,
            json_mode=not use_tools,
            client=client,
        )
        tool_calls = getattr(message, "tool_calls", None) if use_tools else None
        if not tool_calls:
            payload = extract_json_object(message.content or "")
            result = validate_forecast_output(payload, require_temperature=use_tools)
            LOGGER.info("Forecast ready: %.2f kWh", result.predicted_consumption)
            return result

        messages.append(_assistant_tool_message(message))
        for call in tool_calls:
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": call.id,
                    "name": call.function.name,
                    "content": run_tool_call(call.function.name, call.function.arguments),
                }
            )

    raise ExternalServiceError(f"Model kept calling tools after {max_rounds} rounds without answering.")
