"""
StudyBuddy — Error Taxonomy
============================
Every failure the service can report, grouped by what the caller can do
about it. Value-style errors (bad model output, bad upload) derive from
ValueError; environment and upstream failures derive from RuntimeError.
"""

from typing import Optional


class StudyBuddyError(Exception):
    """Base class for all StudyBuddy errors."""

    status_code: int = 500


# ── Credential / Upstream ────────────────────────────────────────────────────

class MissingCredentialError(StudyBuddyError, RuntimeError):
    status_code = 503


class ModelServiceError(StudyBuddyError, RuntimeError):
    """The hosted model call itself failed (network, quota, blocked, ...)."""

    status_code = 502


# ── Malformed Model Output ───────────────────────────────────────────────────

class MalformedResponseError(StudyBuddyError, ValueError):
    status_code = 422


class EmptyResponseError(MalformedResponseError):
    pass


class NoJSONStructureError(MalformedResponseError):
    pass


class JSONParseError(MalformedResponseError):
    """The brace-delimited slice was found but is not valid JSON."""

    def __init__(self, message: str, fragment: str, position: Optional[int] = None):
        super().__init__(message)
        self.fragment = fragment
        self.position = position


class SchemaValidationError(MalformedResponseError):
    """Valid JSON, wrong shape for the expected entity."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


# ── Uploads ──────────────────────────────────────────────────────────────────

class FileValidationError(StudyBuddyError, ValueError):
    status_code = 400


class UnsupportedFileError(FileValidationError):
    pass


# ── Local State / Rendering ──────────────────────────────────────────────────

class ActionInProgressError(StudyBuddyError, RuntimeError):
    status_code = 409


class DiagramRenderError(StudyBuddyError, RuntimeError):
    status_code = 503
