from __future__ import annotations

import logging
from typing import Any, Dict

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from h5inspector.errors import ClipboardError, InspectorError
from h5inspector.inspector import copy_config, format_config, load_model
from h5inspector.types import ModelData
from h5inspector.ui.forecast_view import SLOT_KEY as FORECAST_SLOT_KEY, render_forecast_panel
from h5inspector.ui.state import is_new_upload, notify, notify_error, view_slot


LOGGER = logging.getLogger(__name__)
PLOT_TEMPLATE = "plotly_dark"
SLOT_KEY = "inspector::model"
SELECTED_LAYER_KEY = "inspector::selected_layer"
SEEN_UPLOAD_KEY = "inspector::seen_upload"


def _fmt_int(value: Any) -> str:
    try:
        return f"{int(value):,}"
    except Exception:
        return "Not available"


def layer_table(model: ModelData) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Layer Name": layer.name,
                "Type": layer.type,
                "Output Shape": layer.output_shape,
                "Parameters": layer.params,
            }
            for layer in model.layers
        ]
    )


def layer_params_figure(model: ModelData) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=[layer.name for layer in model.layers],
            y=[layer.params for layer in model.layers],
            text=[layer.type for layer in model.layers],
            name="Parameters",
            hovertemplate="%{x} (%{text})<br>Params=%{y:,}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Parameters per Layer",
        xaxis_title="Layer",
        yaxis_title="Parameters",
        template=PLOT_TEMPLATE,
        margin=dict(l=20, r=20, t=60, b=20),
        font=dict(size=13),
    )
    return fig


def _handle_upload(uploaded: Any, delay_seconds: float) -> None:
    slot = view_slot(SLOT_KEY)
    token = slot.begin()
    try:
        with st.spinner("Processing Model... Please wait while we inspect your model file."):
            model = load_model(uploaded.name, delay_seconds=delay_seconds)
    except InspectorError as exc:
        LOGGER.warning("Model upload rejected: %s", exc)
        notify_error(exc)
        return
    except Exception as exc:
        LOGGER.exception("Model upload failed unexpectedly")
        notify_error(exc, "Model Error")
        return
    finally:
        slot.release(token)
    if slot.resolve(token, model):
        notify("Model Loaded Successfully", f"{uploaded.name} has been processed.")
    else:
        LOGGER.info("Discarding stale model load for %s", uploaded.name)


def _render_upload_prompt(delay_seconds: float) -> None:
    slot = view_slot(SLOT_KEY)
    st.markdown("#### Upload your .h5 Model")
    st.caption("Drag and drop your file here or click to browse.")
    uploaded = st.file_uploader(
        "Select File",
        key=f"inspector::upload::{slot.generation}",
        disabled=slot.busy,
    )
    if uploaded is not None and is_new_upload(SEEN_UPLOAD_KEY, uploaded):
        _handle_upload(uploaded, delay_seconds)
        if slot.value is not None:
            st.rerun()


def _render_summary(model: ModelData) -> None:
    c1, c2, c3 = st.columns(3)
    c1.metric("Model Name", model.name)
    c2.metric("Total Layers", _fmt_int(model.layer_count))
    c3.metric("Total Parameters", _fmt_int(model.total_params))


def _render_layer_config(model: ModelData) -> None:
    selected = st.session_state.get(SELECTED_LAYER_KEY)
    if not selected:
        return
    layer = model.layer(selected)
    text = format_config(layer)
    with st.container(border=True):
        st.markdown(f"**Layer Configuration:** `{layer.name}`")
        st.caption(
            "Detailed configuration for the selected layer. Use the copy icon on the code block for your "
            "browser clipboard."
        )
        st.code(text, language="json")
        c_copy, c_close = st.columns(2)
        if c_copy.button("Copy Configuration", key=f"copy::{layer.name}", use_container_width=True):
            try:
                copy_config(layer)
                notify(
                    "Configuration Copied",
                    f"Configuration for layer '{layer.name}' copied to the clipboard of the machine running this app.",
                )
            except ClipboardError as exc:
                notify_error(exc)
                st.download_button(
                    "Download configuration",
                    data=text.encode("utf-8"),
                    file_name=f"{layer.name}_config.json",
                    mime="application/json",
                )
        if c_close.button("Close", key=f"close::{layer.name}", use_container_width=True):
            st.session_state[SELECTED_LAYER_KEY] = None
            st.rerun()


def _render_model(model: ModelData, cfg: Dict[str, Any]) -> None:
    slot = view_slot(SLOT_KEY)
    _, c_reset = st.columns([4, 1])
    if c_reset.button("Inspect Another Model", use_container_width=True):
        slot.reset()
        view_slot(FORECAST_SLOT_KEY).reset()
        st.session_state[SELECTED_LAYER_KEY] = None
        st.session_state.pop(SEEN_UPLOAD_KEY, None)
        st.rerun()

    st.info("Demo catalogue: the layers below are a fixed example network, not read from the uploaded file.")
    _render_summary(model)
    st.plotly_chart(layer_params_figure(model), use_container_width=True)

    st.subheader("Layer Details")
    st.caption("Inspect individual layers of the model.")
    st.dataframe(layer_table(model), use_container_width=True, hide_index=True)
    c_pick, c_view = st.columns([3, 1])
    picked = c_pick.selectbox("Layer", [layer.name for layer in model.layers], label_visibility="collapsed")
    if c_view.button("View Config", use_container_width=True):
        st.session_state[SELECTED_LAYER_KEY] = picked
    _render_layer_config(model)

    render_forecast_panel(model.name, cfg)


def render_inspector(cfg: Dict[str, Any]) -> None:
    delay = float((cfg.get("inspector") or {}).get("load_delay_seconds", 1.5))
    model = view_slot(SLOT_KEY).value
    if model is None:
        _render_upload_prompt(delay)
    else:
        _render_model(model, cfg)
