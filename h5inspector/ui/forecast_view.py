from __future__ import annotations

import logging
from datetime import date as date_cls
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from h5inspector.errors import InspectorError
from h5inspector.forecast.requester import request_forecast
from h5inspector.forecast.schemas import ForecastResult, build_forecast_request
from h5inspector.ui.dataset_view import SLOT_KEY as DATASET_SLOT_KEY
from h5inspector.ui.state import notify, notify_error, view_slot


LOGGER = logging.getLogger(__name__)
SLOT_KEY = "forecast::prediction"
DATE_KEY = "forecast::date"
MODES = ["City", "Temperature range", "Dataset"]


def _fmt_day(value: date_cls) -> str:
    return pd.Timestamp(value).strftime("%B %d, %Y")


def _fmt_temp(value: Optional[float]) -> str:
    return "Not available" if value is None else f"{value:g}°C"


def build_payload(
    mode: str,
    day: date_cls,
    model_name: str,
    city: str = "",
    temperature: tuple[float, float] = (10, 25),
    dataset_name: str = "",
) -> dict[str, Any]:
    payload: dict[str, Any] = {"date": pd.Timestamp(day).isoformat(), "modelName": model_name}
    if mode == "City":
        payload["city"] = city
    elif mode == "Temperature range":
        payload["temperatureRange"] = [temperature[0], temperature[1]]
    else:
        payload["datasetName"] = dataset_name
    return payload


def _run_prediction(payload: dict[str, Any], cfg: Dict[str, Any]) -> None:
    slot = view_slot(SLOT_KEY)
    try:
        request = build_forecast_request(payload)
    except InspectorError as exc:
        notify_error(exc)
        return

    token = slot.begin()
    try:
        with st.spinner("AI is analyzing patterns..."):
            result = request_forecast(request, cfg=cfg)
    except InspectorError as exc:
        LOGGER.exception("Prediction failed")
        notify_error(exc)
        return
    except Exception as exc:
        LOGGER.exception("Prediction failed unexpectedly")
        notify_error(exc, "Prediction Failed")
        return
    finally:
        slot.release(token)
    if slot.resolve(token, {"result": result, "day": payload["date"]}):
        notify("Prediction Complete", f"Energy consumption predicted for {_fmt_day(pd.Timestamp(payload['date']))}.")


def _render_result(entry: Optional[dict[str, Any]]) -> None:
    if not entry:
        st.caption("Prediction results will appear here.")
        return
    result: ForecastResult = entry["result"]
    with st.container(border=True):
        st.caption(f"Predicted Consumption for {_fmt_day(pd.Timestamp(entry['day']))}")
        st.markdown(f"## {result.predicted_consumption:.2f} kWh")
        if result.temperature_range is not None:
            low, high = result.temperature_range
            st.caption(f"Temperature range: {_fmt_temp(low)} – {_fmt_temp(high)}")
        st.write(result.analysis)


def render_forecast_panel(model_name: str, cfg: Dict[str, Any]) -> None:
    ui_cfg = cfg.get("forecast_ui", {}) or {}
    t_min = int(ui_cfg.get("temperature_min", -20))
    t_max = int(ui_cfg.get("temperature_max", 40))
    t_default = tuple(ui_cfg.get("temperature_default", [10, 25]))
    slot = view_slot(SLOT_KEY)

    st.subheader("Energy Consumption Prediction")
    st.caption("Select a date and a city, temperature range or dataset to forecast energy consumption.")
    left, right = st.columns(2)
    with left:
        day = st.date_input("Date", value=date_cls.today(), key=DATE_KEY)
        mode = st.radio("Predict by", MODES, horizontal=True, key="forecast::mode")
        city = ""
        temperature = t_default
        dataset_name = ""
        if mode == "City":
            city = st.text_input("City", key="forecast::city", placeholder="e.g. Lisbon")
        elif mode == "Temperature range":
            temperature = st.slider(
                "Temperature Range (°C)",
                min_value=t_min,
                max_value=t_max,
                value=(int(t_default[0]), int(t_default[1])),
                step=1,
                key="forecast::temperature",
            )
            st.caption(f"{_fmt_temp(temperature[0])} – {_fmt_temp(temperature[1])}")
        else:
            loaded = st.session_state.get(DATASET_SLOT_KEY)
            default_name = loaded.value.name if loaded is not None and loaded.value is not None else ""
            dataset_name = st.text_input("Dataset name", value=default_name, key="forecast::dataset")

        clicked = st.button(
            "Predict Consumption",
            type="primary",
            use_container_width=True,
            disabled=slot.busy or not day,
        )

    if clicked:
        if not day:
            notify("No Date Selected", "Please select a date to run the prediction.")
        else:
            payload = build_payload(mode, day, model_name, city, temperature, dataset_name)
            _run_prediction(payload, cfg)

    with right:
        _render_result(slot.value)
