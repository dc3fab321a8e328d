from __future__ import annotations

from pathlib import Path
import sys

import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from h5inspector.config import load_config  # noqa: E402
from h5inspector.logging_config import setup_logging  # noqa: E402
from h5inspector.ui.dataset_view import render_dataset_viewer  # noqa: E402
from h5inspector.ui.inspector_view import render_inspector  # noqa: E402
from h5inspector.ui.state import flush_notifications  # noqa: E402


def main() -> None:
    st.set_page_config(page_title="H5 Inspector", layout="wide")
    cfg = load_config()
    setup_logging((cfg.get("logging") or {}).get("level", "INFO"))
    flush_notifications()

    st.title("H5 Inspector")
    st.caption(
        "An elegant developer utility for inspecting `.h5` machine learning models. "
        "Upload a file to view its architecture, layers, shapes, and parameter counts."
    )
    render_inspector(cfg)

    st.divider()
    st.header("Dataset Viewer")
    st.caption("Upload a semicolon-separated `.txt` dataset to view its contents in a table.")
    render_dataset_viewer(cfg)

    flush_notifications()


if __name__ == "__main__":
    main()
