"""Normalize raw collector output into immutable threat facts."""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidInputError
from .models import DataStore, EntryPoint, ResourceRef
from .services import is_known_service, normalize_service

logger = logging.getLogger(__name__)


class ThreatFacts(BaseModel):
    """Validated inventory, entry points and data stores for one analysis run."""

    model_config = ConfigDict(frozen=True)

    inventory: tuple[ResourceRef, ...] = ()
    entry_points: tuple[EntryPoint, ...] = ()
    data_stores: tuple[DataStore, ...] = ()
    skipped: tuple[str, ...] = Field(
        default=(), description="Descriptions of malformed resource entries that were skipped"
    )

    @property
    def services(self) -> frozenset[str]:
        return frozenset(r.service for r in self.inventory)

    @property
    def types(self) -> frozenset[str]:
        return frozenset(r.type for r in self.inventory)

    def has_service(self, *services: str) -> bool:
        """True if any of the given service tags is present."""
        present = self.services
        return any(s in present for s in services)

    def has_type(self, *types: str) -> bool:
        """True if any of the given resource types is present."""
        present = self.types
        return any(t in present for t in types)

    def resources_for(self, services: Iterable[str]) -> list[ResourceRef]:
        """Resources whose service is in `services`, in inventory order."""
        wanted = frozenset(services)
        return [r for r in self.inventory if r.service in wanted]

    @property
    def has_public_entry_points(self) -> bool:
        return any(ep.is_public for ep in self.entry_points)


def _require_array(value: Any, name: str) -> Sequence[Any]:
    if isinstance(value, (list, tuple)):
        return value
    raise InvalidInputError(
        f"'{name}' must be an array, got {type(value).__name__}"
    )


def _as_mapping(entry: Any, name: str, index: int) -> Mapping[str, Any]:
    if isinstance(entry, BaseModel):
        return entry.model_dump()
    if isinstance(entry, Mapping):
        return entry
    raise InvalidInputError(
        f"'{name}[{index}]' must be an object, got {type(entry).__name__}"
    )


def _normalize_resources(raw: Sequence[Any]) -> tuple[list[ResourceRef], list[str]]:
    resources: list[ResourceRef] = []
    skipped: list[str] = []
    seen_ids: set[str] = set()

    for index, entry in enumerate(raw):
        data = _as_mapping(entry, "resources", index)
        resource_id = data.get("id")
        resource_type = data.get("type")
        label = f"resources[{index}]"

        if not isinstance(resource_id, str) or not resource_id.strip():
            skipped.append(f"{label}: missing id")
            continue
        label = f"{label} ({resource_id})"

        service = normalize_service(resource_type, data.get("service"))
        if service is None:
            skipped.append(f"{label}: unrecognized type {resource_type!r}")
            continue
        if not is_known_service(resource_type, service):
            logger.warning(
                f"Resource {label} has unknown service '{service}' (type {resource_type!r}); "
                "no rule will match it"
            )
        if resource_id in seen_ids:
            skipped.append(f"{label}: duplicate id")
            continue

        props = data.get("props") or {}
        if not isinstance(props, Mapping):
            skipped.append(f"{label}: props is not an object")
            continue

        seen_ids.add(resource_id)
        resources.append(
            ResourceRef(
                id=resource_id,
                type=resource_type.strip(),
                service=service,
                props=dict(props),
            )
        )

    for reason in skipped:
        logger.warning(f"Skipping malformed resource entry {reason}")

    return resources, skipped


def _validate_all(raw: Sequence[Any], name: str, model: type[BaseModel]) -> list[Any]:
    items = []
    for index, entry in enumerate(raw):
        data = _as_mapping(entry, name, index)
        try:
            items.append(model.model_validate(data))
        except ValidationError as e:
            raise InvalidInputError(f"'{name}[{index}]' is invalid: {e}") from e
    return items


def build_facts(resources: Any, entry_points: Any, data_stores: Any) -> ThreatFacts:
    """Validate the three collector arrays and normalize them into ThreatFacts.

    Raises:
        InvalidInputError: If any collection is not an array of objects, or an
            entry point or data store does not match its schema.
    """
    raw_resources = _require_array(resources, "resources")
    raw_entry_points = _require_array(entry_points, "entry_points")
    raw_data_stores = _require_array(data_stores, "data_stores")

    inventory, skipped = _normalize_resources(raw_resources)

    return ThreatFacts(
        inventory=tuple(inventory),
        entry_points=tuple(_validate_all(raw_entry_points, "entry_points", EntryPoint)),
        data_stores=tuple(_validate_all(raw_data_stores, "data_stores", DataStore)),
        skipped=tuple(skipped),
    )
