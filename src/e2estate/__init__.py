"""e2estate - preferred component id cache for plugin end-to-end runs.

Remembers which live indexer / download client / import list belongs to a
plugin in a given test environment, and re-resolves it on later runs without
ever guessing between look-alike components.
"""

__version__ = "0.1.0"

from e2estate.cache import PreferredIdCache
from e2estate.core.errors import ConfigError, E2EStateError, StateArgumentError
from e2estate.error_codes import E2EErrorCode, error_code_for_selection
from e2estate.instance_key import derive_instance_key
from e2estate.models import SCHEMA_VERSION, ComponentType, empty_state
from e2estate.registry import get_preferred_id, set_preferred_id
from e2estate.selector import (
    ComponentItem,
    Resolution,
    SelectionResult,
    items_from_api,
    select_component,
)
from e2estate.store import StoreSettings, WriteReason, WriteResult, read_state, write_state

__all__ = [
    # Instance keys
    "derive_instance_key",
    # State document
    "SCHEMA_VERSION",
    "ComponentType",
    "empty_state",
    "read_state",
    "write_state",
    "StoreSettings",
    "WriteReason",
    "WriteResult",
    # Registry
    "get_preferred_id",
    "set_preferred_id",
    # Selection
    "ComponentItem",
    "Resolution",
    "SelectionResult",
    "items_from_api",
    "select_component",
    "E2EErrorCode",
    "error_code_for_selection",
    # Facade
    "PreferredIdCache",
    # Errors
    "E2EStateError",
    "ConfigError",
    "StateArgumentError",
]
