"""State document model.

The in-memory State is the same JSON-shaped dict that is written to disk:

    {
      "schemaVersion": 2,
      "instances": {
        "<instanceKey>": {
          "plugins": {
            "<pluginName>": {"indexerId": 1, "downloadClientId": 2, "importListId": 3}
          }
        }
      }
    }
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from e2estate.core.errors import UnknownComponentTypeError

SCHEMA_VERSION = 2


class ComponentType(StrEnum):
    """Kinds of live entities a plugin can be bound to."""

    INDEXER = "indexer"
    DOWNLOAD_CLIENT = "downloadclient"
    IMPORT_LIST = "importlist"

    @property
    def field_name(self) -> str:
        """Key of this slot inside a plugin record on disk."""
        return _FIELD_NAMES[self]

    @classmethod
    def parse(cls, value: ComponentType | str) -> ComponentType:
        """Accept the enum, its value, or a differently-cased spelling (downloadClient)."""
        if isinstance(value, ComponentType):
            return value
        if isinstance(value, str):
            norm = value.strip().lower().replace("_", "").replace("-", "")
            for member in cls:
                if member.value == norm:
                    return member
        raise UnknownComponentTypeError(value)


_FIELD_NAMES = {
    ComponentType.INDEXER: "indexerId",
    ComponentType.DOWNLOAD_CLIENT: "downloadClientId",
    ComponentType.IMPORT_LIST: "importListId",
}


def is_valid_id(value: Any) -> bool:
    """Stored ids are positive integers (bool is not an integer here)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def empty_state() -> dict[str, Any]:
    return {"schemaVersion": SCHEMA_VERSION, "instances": {}}


def normalize_state(raw: Any) -> dict[str, Any]:
    """Coerce a parsed document into a well-formed State.

    Anything that does not fit the current schema is dropped: an unknown
    schemaVersion yields the empty State, and malformed instance, plugin or
    id entries are skipped one by one.
    """
    if not isinstance(raw, dict) or raw.get("schemaVersion") != SCHEMA_VERSION:
        return empty_state()
    instances = raw.get("instances")
    if not isinstance(instances, dict):
        return empty_state()

    out = empty_state()
    for instance_key, instance in instances.items():
        if not isinstance(instance_key, str) or not isinstance(instance, dict):
            continue
        plugins = instance.get("plugins")
        if not isinstance(plugins, dict):
            continue
        kept: dict[str, dict[str, int]] = {}
        for plugin_name, record in plugins.items():
            if not isinstance(plugin_name, str) or not isinstance(record, dict):
                continue
            ids = {
                ct.field_name: record[ct.field_name]
                for ct in ComponentType
                if is_valid_id(record.get(ct.field_name))
            }
            if ids:
                kept[plugin_name] = ids
        if kept:
            out["instances"][instance_key] = {"plugins": kept}
    return out
