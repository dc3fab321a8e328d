from __future__ import annotations

import logging
from typing import Any, Dict

import streamlit as st

from h5inspector.datasets import read_dataset, to_frame
from h5inspector.errors import FileReadError, InspectorError
from h5inspector.types import Dataset
from h5inspector.ui.state import is_new_upload, notify, notify_error, view_slot


LOGGER = logging.getLogger(__name__)
SLOT_KEY = "datasets::dataset"
SEEN_UPLOAD_KEY = "datasets::seen_upload"


def _handle_upload(uploaded: Any) -> None:
    slot = view_slot(SLOT_KEY)
    token = slot.begin()
    try:
        with st.spinner("Processing Dataset... Please wait while we parse your dataset file."):
            try:
                data = uploaded.getvalue()
            except OSError as exc:
                raise FileReadError("Could not read the selected file.") from exc
            dataset = read_dataset(uploaded.name, data)
    except InspectorError as exc:
        LOGGER.warning("Dataset upload rejected: %s", exc)
        notify_error(exc)
        return
    except Exception as exc:
        LOGGER.exception("Dataset upload failed unexpectedly")
        notify_error(exc, "Dataset Error")
        return
    finally:
        slot.release(token)
    if slot.resolve(token, dataset):
        notify("Dataset Loaded", f"{uploaded.name} has been processed.")


def _render_dataset(dataset: Dataset, preview_rows: int) -> None:
    slot = view_slot(SLOT_KEY)
    _, c_reset = st.columns([4, 1])
    if c_reset.button("Upload Another Dataset", use_container_width=True):
        slot.reset()
        st.session_state.pop(SEEN_UPLOAD_KEY, None)
        st.rerun()

    st.markdown(f"#### {dataset.name}")
    st.caption(f"Showing the first {preview_rows} rows of the uploaded dataset.")
    st.dataframe(to_frame(dataset, preview_rows), use_container_width=True, hide_index=True)


def render_dataset_viewer(cfg: Dict[str, Any]) -> None:
    preview_rows = int((cfg.get("datasets") or {}).get("preview_rows", 5))
    slot = view_slot(SLOT_KEY)
    if slot.value is not None:
        _render_dataset(slot.value, preview_rows)
        return

    st.markdown("#### Upload your .txt Dataset")
    st.caption("Drag and drop your file here or click to browse.")
    uploaded = st.file_uploader(
        "Select File",
        key=f"datasets::upload::{slot.generation}",
        disabled=slot.busy,
    )
    if uploaded is not None and is_new_upload(SEEN_UPLOAD_KEY, uploaded):
        _handle_upload(uploaded)
        if slot.value is not None:
            st.rerun()
