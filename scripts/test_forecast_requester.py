from __future__ import annotations

import json
from pathlib import Path
import sys
from types import SimpleNamespace
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from h5inspector.config import comfort_band, load_config  # noqa: E402
from h5inspector.errors import (  # noqa: E402
    ExternalServiceError,
    InvalidArgumentError,
    SchemaValidationError,
)
from h5inspector.forecast.prompts import build_instruction  # noqa: E402
from h5inspector.forecast.requester import request_forecast  # noqa: E402
from h5inspector.forecast.run_forecast import build_parser, request_from_args  # noqa: E402
from h5inspector.forecast.schemas import (  # noqa: E402
    ByCity,
    ByDataset,
    ByTemperature,
    build_forecast_request,
    validate_forecast_output,
)


CFG: dict[str, Any] = {
    "llm": {"model": "test-model", "temperature": 0.0, "max_tokens": 300},
    "forecast": {
        "max_tool_rounds": 2,
        "kwh_range": [100, 300],
        "comfort_bands": {"by_city": [24, 29], "by_temperature": [18, 22], "by_dataset": [18, 22]},
    },
}


class _FakeCompletions:
    def __init__(self, replies: list[Any]) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=reply)])


class FakeGroq:
    def __init__(self, replies: list[Any]) -> None:
        self.completions = _FakeCompletions(replies)
        self.chat = SimpleNamespace(completions=self.completions)


def _answer(payload: Any) -> SimpleNamespace:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return SimpleNamespace(content=text, tool_calls=None)


def _tool_call(call_id: str, args: dict[str, Any]) -> SimpleNamespace:
    fn = SimpleNamespace(name="getTemperatureForCity", arguments=json.dumps(args))
    return SimpleNamespace(id=call_id, type="function", function=fn)


def _expect(exc_type: type, fn, *args, **kwargs) -> Exception:
    try:
        fn(*args, **kwargs)
    except exc_type as exc:
        return exc
    raise AssertionError(f"Expected {exc_type.__name__}")


def test_build_request_variants() -> None:
    base = {"date": "2025-01-15T00:00:00.000Z", "modelName": "cnn.h5"}
    assert isinstance(build_forecast_request({**base, "city": "Paris"}), ByCity)
    by_temp = build_forecast_request({**base, "temperatureRange": [10, 25]})
    assert isinstance(by_temp, ByTemperature) and by_temp.temperature_range == (10.0, 25.0)
    assert isinstance(build_forecast_request({**base, "datasetName": "power.txt"}), ByDataset)


def test_malformed_request_fails_before_call() -> None:
    client = FakeGroq([])
    base = {"date": "2025-01-15", "modelName": "cnn.h5"}
    bad_payloads = [
        dict(base),
        {**base, "city": "Paris", "datasetName": "x.txt"},
        {**base, "temperatureRange": [10]},
        {**base, "temperatureRange": [30, 10]},
        {**base, "temperatureRange": ["10", 20]},
        {"date": "not a date", "modelName": "cnn.h5", "city": "Paris"},
        {"date": "today", "modelName": "cnn.h5", "city": "Paris"},
        {"date": "15/01/2025", "modelName": "cnn.h5", "city": "Paris"},
        {"date": "2025-01-15", "modelName": "", "city": "Paris"},
    ]
    for payload in bad_payloads:
        _expect(InvalidArgumentError, request_forecast, payload, client=client, cfg=CFG)
    assert client.completions.calls == []


def test_city_variant_serves_tool_calls() -> None:
    client = FakeGroq(
        [
            SimpleNamespace(content=None, tool_calls=[_tool_call("call_1", {"city": "Paris", "date": "2025-01-15"})]),
            _answer({"predictedConsumption": 212.4, "analysis": "Cold start. Heating dominates.", "temperatureRange": [25, 37]}),
        ]
    )
    req = ByCity(date="2025-01-15T00:00:00.000Z", model_name="cnn.h5", city="Paris")
    result = request_forecast(req, client=client, cfg=CFG)

    assert result.predicted_consumption == 212.4
    assert result.temperature_range == (25.0, 37.0)
    assert 100 <= result.predicted_consumption <= 300

    calls = client.completions.calls
    assert len(calls) == 2
    assert calls[0]["tools"][0]["function"]["name"] == "getTemperatureForCity"
    assert "response_format" not in calls[0]
    tool_msgs = [m for m in calls[1]["messages"] if m["role"] == "tool"]
    assert len(tool_msgs) == 1
    assert tool_msgs[0]["tool_call_id"] == "call_1"
    assert json.loads(tool_msgs[0]["content"]) == {"temperatureRange": [25, 37]}


def test_city_variant_requires_temperature_echo() -> None:
    client = FakeGroq([_answer({"predictedConsumption": 150, "analysis": "Mild day."})])
    req = ByCity(date="2025-01-15", model_name="cnn.h5", city="Paris")
    _expect(SchemaValidationError, request_forecast, req, client=client, cfg=CFG)


def test_temperature_variant_uses_json_mode() -> None:
    client = FakeGroq([_answer({"predictedConsumption": 140, "analysis": "Comfortable weather keeps load low."})])
    req = ByTemperature(date="2025-06-01", model_name="cnn.h5", temperature_range=(18, 22))
    result = request_forecast(req, client=client, cfg=CFG)
    assert result.temperature_range is None
    call = client.completions.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert "tools" not in call
    assert call["model"] == "test-model"
    assert "18-22°C" in call["messages"][1]["content"]


def test_dataset_variant_prompt() -> None:
    client = FakeGroq([_answer('Here you go: {"predictedConsumption": 199.9, "analysis": "Weekday load."}')])
    req = ByDataset(date="2025-06-01", model_name="cnn.h5", dataset_name="household_power.txt")
    result = request_forecast(req, client=client, cfg=CFG)
    assert result.predicted_consumption == 199.9
    assert "household_power.txt" in client.completions.calls[0]["messages"][1]["content"]


def _request_input(content: str) -> dict[str, Any]:
    marker = "Request input (JSON):\n"
    assert marker in content
    return json.loads(content.split(marker, 1)[1])


def test_request_sent_as_structured_input() -> None:
    cases = [
        (
            ByCity(date="2025-01-15", model_name="cnn.h5", city="Paris"),
            {"predictedConsumption": 200, "analysis": "x", "temperatureRange": [25, 37]},
            {"date": "2025-01-15", "modelName": "cnn.h5", "city": "Paris"},
        ),
        (
            ByTemperature(date="2025-06-01", model_name="cnn.h5", temperature_range=(18.0, 22.0)),
            {"predictedConsumption": 140, "analysis": "x"},
            {"date": "2025-06-01", "modelName": "cnn.h5", "temperatureRange": [18.0, 22.0]},
        ),
        (
            ByDataset(date="2025-06-01", model_name="cnn.h5", dataset_name="power.txt"),
            {"predictedConsumption": 160, "analysis": "x"},
            {"date": "2025-06-01", "modelName": "cnn.h5", "datasetName": "power.txt"},
        ),
    ]
    for req, reply, expected in cases:
        client = FakeGroq([_answer(reply)])
        request_forecast(req, client=client, cfg=CFG)
        user_msg = client.completions.calls[0]["messages"][1]
        assert user_msg["role"] == "user"
        assert _request_input(user_msg["content"]) == expected


def test_malformed_responses() -> None:
    bad = [
        {"predictedConsumption": "210", "analysis": "x"},
        {"predictedConsumption": True, "analysis": "x"},
        {"predictedConsumption": 210, "analysis": 5},
        {"predictedConsumption": 210, "analysis": "x", "temperatureRange": [12]},
        {"analysis": "x"},
    ]
    for payload in bad:
        _expect(SchemaValidationError, validate_forecast_output, payload)

    req = ByTemperature(date="2025-06-01", model_name="cnn.h5", temperature_range=(5, 9))
    client = FakeGroq([_answer("I cannot answer that.")])
    _expect(SchemaValidationError, request_forecast, req, client=client, cfg=CFG)
    client = FakeGroq([_answer({"predictedConsumption": 210, "analysis": "x", "temperatureRange": [1]})])
    _expect(SchemaValidationError, request_forecast, req, client=client, cfg=CFG)


def test_non_finite_numbers_rejected() -> None:
    req = ByTemperature(date="2025-06-01", model_name="cnn.h5", temperature_range=(5, 9))
    replies = [
        '{"predictedConsumption": NaN, "analysis": "x"}',
        '{"predictedConsumption": Infinity, "analysis": "x"}',
        '{"predictedConsumption": 1' + "0" * 400 + ', "analysis": "x"}',
        '{"predictedConsumption": 150, "analysis": "x", "temperatureRange": [-Infinity, 20]}',
    ]
    for text in replies:
        client = FakeGroq([_answer(text)])
        _expect(SchemaValidationError, request_forecast, req, client=client, cfg=CFG)

    base = {"date": "2025-06-01", "modelName": "cnn.h5"}
    _expect(InvalidArgumentError, build_forecast_request, {**base, "temperatureRange": [float("nan"), 20]})


def test_service_failures() -> None:
    req = ByTemperature(date="2025-06-01", model_name="cnn.h5", temperature_range=(5, 9))
    client = FakeGroq([ConnectionError("network down")])
    exc = _expect(ExternalServiceError, request_forecast, req, client=client, cfg=CFG)
    assert "network down" in str(exc)
    assert len(client.completions.calls) == 1

    looping = [
        SimpleNamespace(content=None, tool_calls=[_tool_call(f"call_{i}", {"city": "Rome", "date": "2025-03-10"})])
        for i in range(3)
    ]
    client = FakeGroq(looping)
    req_city = ByCity(date="2025-03-10", model_name="cnn.h5", city="Rome")
    _expect(ExternalServiceError, request_forecast, req_city, client=client, cfg=CFG)
    assert len(client.completions.calls) == 3


def test_comfort_bands_stay_per_variant() -> None:
    cfg = load_config()
    assert comfort_band(cfg, "by_city") == (24.0, 29.0)
    assert comfort_band(cfg, "by_temperature") == (18.0, 22.0)
    city_prompt = build_instruction(ByCity("2025-01-15", "m.h5", "Oslo"), comfort_band(cfg, "by_city"))
    temp_prompt = build_instruction(
        ByTemperature("2025-01-15", "m.h5", (0, 5)), comfort_band(cfg, "by_temperature")
    )
    assert "24-29°C" in city_prompt and "getTemperatureForCity" in city_prompt
    assert "18-22°C" in temp_prompt and "getTemperatureForCity" not in temp_prompt


def test_cli_arguments() -> None:
    parser = build_parser()
    req = request_from_args(parser.parse_args(["--date", "2025-01-15", "--model-name", "m.h5", "--temperature", "3", "9"]))
    assert isinstance(req, ByTemperature) and req.temperature_range == (3.0, 9.0)
    req = request_from_args(parser.parse_args(["--date", "2025-01-15", "--model-name", "m.h5", "--city", "Oslo"]))
    assert isinstance(req, ByCity) and req.city == "Oslo"


def main() -> None:
    test_build_request_variants()
    test_malformed_request_fails_before_call()
    test_city_variant_serves_tool_calls()
    test_city_variant_requires_temperature_echo()
    test_temperature_variant_uses_json_mode()
    test_dataset_variant_prompt()
    test_request_sent_as_structured_input()
    test_malformed_responses()
    test_non_finite_numbers_rejected()
    test_service_failures()
    test_comfort_bands_stay_per_variant()
    test_cli_arguments()
    print("Forecast requester checks passed.")


if __name__ == "__main__":
    main()
