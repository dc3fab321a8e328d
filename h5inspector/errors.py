from __future__ import annotations


class InspectorError(Exception):
    """Base class for errors surfaced to the user as a notification."""

    title = "Error"


class InvalidArgumentError(InspectorError, ValueError):
    title = "Invalid Input"


class InvalidFileType(InspectorError, ValueError):
    title = "Invalid File Type"


class EmptyFileError(InspectorError, ValueError):
    title = "Empty File"


class FileReadError(InspectorError, OSError):
    title = "File Read Error"


class SchemaValidationError(InspectorError, ValueError):
    title = "Invalid Prediction"


class ExternalServiceError(InspectorError, RuntimeError):
    title = "Prediction Failed"


class ClipboardError(InspectorError, RuntimeError):
    title = "Copy Failed"
