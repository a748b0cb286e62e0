"""E2E error codes understood by the run manifest.

Gates stamp these on failures so CI triage does not depend on matching
message text. The cache itself only ever produces COMPONENT_AMBIGUOUS (via
error_code_for_selection); the full set is kept so callers share one
vocabulary.
"""

from __future__ import annotations

from enum import StrEnum

from e2estate.selector import SelectionResult

METADATA_KEY = "e2eErrorCode"


class E2EErrorCode(StrEnum):
    NONE = ""
    AUTH_MISSING = "E2E_AUTH_MISSING"
    CONFIG_INVALID = "E2E_CONFIG_INVALID"
    API_TIMEOUT = "E2E_API_TIMEOUT"
    DOCKER_UNAVAILABLE = "E2E_DOCKER_UNAVAILABLE"
    NO_RELEASES_ATTRIBUTED = "E2E_NO_RELEASES_ATTRIBUTED"
    QUEUE_NOT_FOUND = "E2E_QUEUE_NOT_FOUND"
    ZERO_AUDIO_FILES = "E2E_ZERO_AUDIO_FILES"
    METADATA_MISSING = "E2E_METADATA_MISSING"
    IMPORT_FAILED = "E2E_IMPORT_FAILED"
    COMPONENT_AMBIGUOUS = "E2E_COMPONENT_AMBIGUOUS"
    LOAD_FAILURE = "E2E_LOAD_FAILURE"
    RATE_LIMITED = "E2E_RATE_LIMITED"
    PROVIDER_UNAVAILABLE = "E2E_PROVIDER_UNAVAILABLE"
    CANCELLED = "E2E_CANCELLED"


def error_code_for_selection(result: SelectionResult) -> E2EErrorCode:
    """COMPONENT_AMBIGUOUS for ambiguous resolutions, NONE otherwise.

    A `none` resolution is not mapped: whether a missing component is an auth
    or a config problem is the calling gate's call.
    """
    if result.is_ambiguous:
        return E2EErrorCode.COMPONENT_AMBIGUOUS
    return E2EErrorCode.NONE


def with_error_code(metadata: dict[str, str] | None, code: E2EErrorCode) -> dict[str, str]:
    """Return a copy of metadata with the code under METADATA_KEY (NONE leaves it as is)."""
    out = dict(metadata or {})
    if code is not E2EErrorCode.NONE:
        out[METADATA_KEY] = str(code)
    return out
