"""Preferred id registry: get/set one (instance, plugin, component type) slot.

Pure accessors over the in-memory State; persistence is the caller's job
(see e2estate.store.write_state).
"""

from __future__ import annotations

from typing import Any

from e2estate.core.errors import StateArgumentError
from e2estate.models import SCHEMA_VERSION, ComponentType, is_valid_id


def _require_name(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise StateArgumentError(f"{what} is required")
    return value


def get_preferred_id(
    state: dict[str, Any],
    instance_key: str,
    plugin_name: str,
    component_type: ComponentType | str,
) -> int | None:
    """Return the remembered id, or None when absent or not a positive int."""
    field = ComponentType.parse(component_type).field_name
    instances = state.get("instances") if isinstance(state, dict) else None
    if not isinstance(instances, dict):
        return None
    instance = instances.get(instance_key)
    if not isinstance(instance, dict):
        return None
    plugins = instance.get("plugins")
    if not isinstance(plugins, dict):
        return None
    record = plugins.get(plugin_name)
    if not isinstance(record, dict):
        return None
    value = record.get(field)
    return value if is_valid_id(value) else None


def set_preferred_id(
    state: dict[str, Any],
    instance_key: str,
    plugin_name: str,
    component_type: ComponentType | str,
    component_id: int,
) -> None:
    """Record component_id for the slot, creating intermediate records.

    Raises:
        StateArgumentError: empty key/plugin, unknown type, or non-positive id.
    """
    _require_name(instance_key, "instance_key")
    _require_name(plugin_name, "plugin_name")
    field = ComponentType.parse(component_type).field_name
    if not is_valid_id(component_id):
        raise StateArgumentError(f"component id must be a positive integer, got {component_id!r}")

    state.setdefault("schemaVersion", SCHEMA_VERSION)
    instances = state.get("instances")
    if not isinstance(instances, dict):
        instances = state["instances"] = {}
    instance = instances.get(instance_key)
    if not isinstance(instance, dict):
        instance = instances[instance_key] = {}
    plugins = instance.get("plugins")
    if not isinstance(plugins, dict):
        plugins = instance["plugins"] = {}
    record = plugins.get(plugin_name)
    if not isinstance(record, dict):
        record = plugins[plugin_name] = {}
    record[field] = component_id
