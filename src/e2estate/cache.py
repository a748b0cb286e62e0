"""Preferred id cache facade for E2E gates.

Glues the store, registry and selector for the two moments a gate cares
about: resolving which live component is "ours", and remembering the id
after a component was configured for the first time. Every call goes back
to the filesystem; nothing is held between calls.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from e2estate.core.config import ConfigResolver
from e2estate.core.diagnostics import emit
from e2estate.core.logging import get_logger
from e2estate.models import ComponentType
from e2estate.registry import get_preferred_id, set_preferred_id
from e2estate.selector import ComponentItem, SelectionResult, select_component
from e2estate.store import StoreSettings, WriteResult, read_state, write_state

_logger = get_logger(__name__)


@dataclass(frozen=True)
class PreferredIdCache:
    path: Path
    settings: StoreSettings = StoreSettings()

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> PreferredIdCache:
        return cls(
            path=resolver.resolve_path("state.path"),
            settings=StoreSettings.from_resolver(resolver),
        )

    def preferred_id(
        self, instance_key: str, plugin_name: str, component_type: ComponentType | str
    ) -> int | None:
        return get_preferred_id(read_state(self.path), instance_key, plugin_name, component_type)

    def resolve(
        self,
        instance_key: str,
        plugin_name: str,
        component_type: ComponentType | str,
        items: Iterable[ComponentItem],
    ) -> SelectionResult:
        """Select the live component for plugin_name, honoring the remembered id."""
        ctype = ComponentType.parse(component_type)
        preferred = self.preferred_id(instance_key, plugin_name, ctype)
        result = select_component(items, plugin_name, preferred)

        if result.is_ambiguous:
            ids = ", ".join(str(i) for i in result.candidate_ids)
            _logger.warning(
                f"Ambiguous {ctype} for plugin '{plugin_name}' "
                f"({result.resolution}): candidates {ids}"
            )
        else:
            _logger.verbose(
                f"Resolved {ctype} for plugin '{plugin_name}': {result.resolution} "
                f"(preferred={preferred})"
            )
        emit(
            "component.selected",
            component="e2estate.cache",
            operation="resolve",
            data={
                "instance_key": instance_key,
                "plugin": plugin_name,
                "component_type": str(ctype),
                "preferred_id": preferred,
                **result.to_dict(),
            },
        )
        return result

    def remember(
        self,
        instance_key: str,
        plugin_name: str,
        component_type: ComponentType | str,
        component_id: int,
    ) -> WriteResult:
        """Record component_id as preferred and persist it (best effort)."""
        state = read_state(self.path)
        set_preferred_id(state, instance_key, plugin_name, component_type, component_id)
        return write_state(self.path, state, self.settings)
