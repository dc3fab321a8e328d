from __future__ import annotations

from typing import Any

import streamlit as st

from h5inspector.session import NoticeQueue, ViewSlot


NOTICES_KEY = "notices"


def view_slot(key: str) -> ViewSlot[Any]:
    if key not in st.session_state:
        st.session_state[key] = ViewSlot()
    return st.session_state[key]


def notices() -> NoticeQueue:
    if NOTICES_KEY not in st.session_state:
        st.session_state[NOTICES_KEY] = NoticeQueue()
    return st.session_state[NOTICES_KEY]


def notify(title: str, body: str) -> None:
    notices().push(title, body)


def notify_error(exc: BaseException, fallback_title: str = "Error") -> None:
    notices().push_error(exc, fallback_title)


def flush_notifications() -> None:
    for n in notices().drain():
        st.toast(f"**{n.title}**  \n{n.body}", icon="⚠️" if n.error else "✅")


def upload_id(uploaded: Any) -> str:
    file_id = getattr(uploaded, "file_id", None)
    if file_id:
        return str(file_id)
    return f"{uploaded.name}:{getattr(uploaded, 'size', '')}"


def is_new_upload(seen_key: str, uploaded: Any) -> bool:
    """True once per distinct uploaded file, so a rerun does not reprocess it."""
    uid = upload_id(uploaded)
    if st.session_state.get(seen_key) == uid:
        return False
    st.session_state[seen_key] = uid
    return True
