"""Tests for E2E error code mapping."""

from __future__ import annotations

from e2estate.error_codes import (
    METADATA_KEY,
    E2EErrorCode,
    error_code_for_selection,
    with_error_code,
)
from e2estate.selector import ComponentItem, select_component


def test_ambiguous_selections_map_to_component_ambiguous() -> None:
    by_name = select_component(
        [
            ComponentItem(id=1, implementation_name="Q"),
            ComponentItem(id=2, implementation_name="Q"),
        ],
        "Q",
    )
    fuzzy = select_component(
        [ComponentItem(id=1, implementation="QIdx"), ComponentItem(id=2, implementation="QDl")],
        "Q",
    )

    assert error_code_for_selection(by_name) == E2EErrorCode.COMPONENT_AMBIGUOUS
    assert error_code_for_selection(fuzzy) == E2EErrorCode.COMPONENT_AMBIGUOUS
    assert str(E2EErrorCode.COMPONENT_AMBIGUOUS) == "E2E_COMPONENT_AMBIGUOUS"


def test_resolved_and_missing_selections_have_no_code() -> None:
    found = select_component([ComponentItem(id=1, implementation_name="Q")], "Q")
    missing = select_component([], "Q")

    assert error_code_for_selection(found) is E2EErrorCode.NONE
    assert error_code_for_selection(missing) is E2EErrorCode.NONE


def test_with_error_code_copies_metadata() -> None:
    original = {"gate": "search"}

    stamped = with_error_code(original, E2EErrorCode.COMPONENT_AMBIGUOUS)

    assert stamped == {"gate": "search", METADATA_KEY: "E2E_COMPONENT_AMBIGUOUS"}
    assert original == {"gate": "search"}
    assert with_error_code(None, E2EErrorCode.NONE) == {}
