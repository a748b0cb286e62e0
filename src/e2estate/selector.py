"""Component selection: which live entity belongs to a plugin.

Tiers, evaluated in strict order with case-insensitive comparisons:

1. preferredId         - remembered id exists AND its type still matches the plugin
2. implementationName  - exactly one item whose implementationName equals the plugin
3. fuzzy               - exactly one item whose implementation contains the plugin
4. none

Two or more matches at tier 2 or 3 stop the search and come back as an
ambiguous resolution listing every candidate id. Tiers are independent; no
score is carried from one to the next. The user-editable `name` field never
takes part in matching.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from e2estate.core.errors import StateArgumentError
from e2estate.models import is_valid_id


class Resolution(StrEnum):
    PREFERRED_ID = "preferredId"
    IMPLEMENTATION_NAME = "implementationName"
    FUZZY = "fuzzy"
    AMBIGUOUS_IMPLEMENTATION_NAME = "ambiguousImplementationName"
    AMBIGUOUS_FUZZY = "ambiguousFuzzy"
    NONE = "none"

    @property
    def is_ambiguous(self) -> bool:
        return self in (Resolution.AMBIGUOUS_IMPLEMENTATION_NAME, Resolution.AMBIGUOUS_FUZZY)


@dataclass(frozen=True)
class ComponentItem:
    """A configured indexer, download client or import list as seen live."""

    id: int
    name: str = ""
    implementation_name: str = ""
    implementation: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> ComponentItem:
        """Adapt one entity from the live API (camelCase keys).

        Raises:
            StateArgumentError: the entity has no positive integer id.
        """
        item_id = data.get("id")
        if not is_valid_id(item_id):
            raise StateArgumentError(f"Component has no valid id: {item_id!r}")
        return cls(
            id=item_id,
            name=str(data.get("name") or ""),
            implementation_name=str(data.get("implementationName") or ""),
            implementation=str(data.get("implementation") or ""),
        )


def items_from_api(entities: Iterable[Mapping[str, Any]]) -> list[ComponentItem]:
    """Adapt a live-query result, skipping entities without a usable id."""
    out: list[ComponentItem] = []
    for entity in entities:
        if isinstance(entity, Mapping) and is_valid_id(entity.get("id")):
            out.append(ComponentItem.from_api(entity))
    return out


@dataclass(frozen=True)
class SelectionResult:
    component: ComponentItem | None
    resolution: Resolution
    candidate_ids: tuple[int, ...] = field(default=())

    @property
    def is_ambiguous(self) -> bool:
        return self.resolution.is_ambiguous

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "componentId": self.component.id if self.component is not None else None,
            "resolution": str(self.resolution),
        }
        if self.candidate_ids:
            out["candidateIds"] = list(self.candidate_ids)
        return out


def _fold(value: str) -> str:
    return (value or "").casefold()


def _type_matches(item: ComponentItem, plugin: str) -> bool:
    return _fold(item.implementation_name) == plugin or _fold(item.implementation) == plugin


def _single_or_ambiguous(
    matches: list[ComponentItem], hit: Resolution, ambiguous: Resolution
) -> SelectionResult | None:
    if len(matches) == 1:
        return SelectionResult(component=matches[0], resolution=hit)
    if len(matches) > 1:
        ids = tuple(sorted(m.id for m in matches))
        return SelectionResult(component=None, resolution=ambiguous, candidate_ids=ids)
    return None


def select_component(
    items: Iterable[ComponentItem],
    plugin_name: str,
    preferred_id: int | None = None,
) -> SelectionResult:
    """Resolve the item that belongs to plugin_name without guessing.

    Raises:
        StateArgumentError: plugin_name is empty or an item is not a ComponentItem.
    """
    if not isinstance(plugin_name, str) or not plugin_name.strip():
        raise StateArgumentError("plugin_name is required for component selection")
    plugin = _fold(plugin_name.strip())

    pool = list(items)
    for item in pool:
        if not isinstance(item, ComponentItem):
            raise StateArgumentError(
                f"Expected ComponentItem, got {type(item).__name__}",
                "Adapt live entities with ComponentItem.from_api / items_from_api",
            )

    if is_valid_id(preferred_id):
        for item in pool:
            if item.id == preferred_id and _type_matches(item, plugin):
                return SelectionResult(component=item, resolution=Resolution.PREFERRED_ID)

    by_impl_name = [i for i in pool if _fold(i.implementation_name) == plugin]
    result = _single_or_ambiguous(
        by_impl_name, Resolution.IMPLEMENTATION_NAME, Resolution.AMBIGUOUS_IMPLEMENTATION_NAME
    )
    if result is not None:
        return result

    by_impl = [i for i in pool if plugin in _fold(i.implementation)]
    result = _single_or_ambiguous(by_impl, Resolution.FUZZY, Resolution.AMBIGUOUS_FUZZY)
    if result is not None:
        return result

    return SelectionResult(component=None, resolution=Resolution.NONE)
