from __future__ import annotations

from h5inspector.errors import InvalidFileType


def check_extension(filename: str, suffix: str, kind: str) -> None:
    if not filename or not filename.endswith(suffix):
        raise InvalidFileType(f"Please upload a valid {suffix} {kind} file.")
