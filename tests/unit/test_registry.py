"""Unit tests for the preferred id registry."""

from __future__ import annotations

import pytest

from e2estate.core.errors import StateArgumentError, UnknownComponentTypeError
from e2estate.models import ComponentType, empty_state
from e2estate.registry import get_preferred_id, set_preferred_id


def test_set_creates_intermediate_records() -> None:
    state = empty_state()

    set_preferred_id(state, "A", "Qobuzarr", ComponentType.INDEXER, 101)

    assert state == {
        "schemaVersion": 2,
        "instances": {"A": {"plugins": {"Qobuzarr": {"indexerId": 101}}}},
    }


def test_slots_are_independent() -> None:
    state = empty_state()
    set_preferred_id(state, "A", "Qobuzarr", "indexer", 1)
    set_preferred_id(state, "A", "Qobuzarr", "downloadclient", 2)
    set_preferred_id(state, "A", "Qobuzarr", "importlist", 3)
    set_preferred_id(state, "A", "Tidalarr", "indexer", 4)

    assert get_preferred_id(state, "A", "Qobuzarr", "indexer") == 1
    assert get_preferred_id(state, "A", "Qobuzarr", "downloadclient") == 2
    assert get_preferred_id(state, "A", "Qobuzarr", "importlist") == 3
    assert get_preferred_id(state, "A", "Tidalarr", "indexer") == 4
    assert get_preferred_id(state, "A", "Tidalarr", "importlist") is None
    assert get_preferred_id(state, "B", "Qobuzarr", "indexer") is None


def test_set_overwrites_existing_slot() -> None:
    state = empty_state()
    set_preferred_id(state, "A", "Qobuzarr", "indexer", 1)
    set_preferred_id(state, "A", "Qobuzarr", "indexer", 9)

    assert get_preferred_id(state, "A", "Qobuzarr", "indexer") == 9


@pytest.mark.parametrize("spelling", ["downloadClient", "DOWNLOADCLIENT", "download_client"])
def test_component_type_spellings(spelling: str) -> None:
    state = empty_state()
    set_preferred_id(state, "A", "Qobuzarr", spelling, 5)

    assert state["instances"]["A"]["plugins"]["Qobuzarr"] == {"downloadClientId": 5}
    assert get_preferred_id(state, "A", "Qobuzarr", ComponentType.DOWNLOAD_CLIENT) == 5


@pytest.mark.parametrize("bad", [0, -1, True, 1.5, "3", None])
def test_set_rejects_non_positive_ids(bad) -> None:
    with pytest.raises(StateArgumentError):
        set_preferred_id(empty_state(), "A", "Qobuzarr", "indexer", bad)


def test_unknown_component_type() -> None:
    with pytest.raises(UnknownComponentTypeError):
        set_preferred_id(empty_state(), "A", "Qobuzarr", "notifier", 1)
    with pytest.raises(StateArgumentError):
        get_preferred_id(empty_state(), "A", "Qobuzarr", "metadata")


@pytest.mark.parametrize(("key", "plugin"), [("", "Qobuzarr"), ("A", " ")])
def test_set_requires_key_and_plugin(key: str, plugin: str) -> None:
    with pytest.raises(StateArgumentError):
        set_preferred_id(empty_state(), key, plugin, "indexer", 1)


def test_get_treats_garbage_slots_as_absent() -> None:
    state = {
        "schemaVersion": 2,
        "instances": {
            "A": {"plugins": {"Qobuzarr": {"indexerId": "12", "importListId": 0}}},
            "B": {"plugins": []},
            "C": "nope",
        },
    }

    assert get_preferred_id(state, "A", "Qobuzarr", "indexer") is None
    assert get_preferred_id(state, "A", "Qobuzarr", "importlist") is None
    assert get_preferred_id(state, "B", "Qobuzarr", "indexer") is None
    assert get_preferred_id(state, "C", "Qobuzarr", "indexer") is None
    assert get_preferred_id({}, "A", "Qobuzarr", "indexer") is None


def test_set_on_blank_dict_stamps_schema_version() -> None:
    state: dict = {}

    set_preferred_id(state, "A", "Qobuzarr", "indexer", 9)

    assert state["schemaVersion"] == 2
    assert get_preferred_id(state, "A", "Qobuzarr", "indexer") == 9
