"""Static catalog of the equipment kinds that carry door seals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EquipmentKind(str, Enum):
    """Closed set of sealable equipment; values double as route slugs."""

    FULL_TROLLEY = "full-trolley"
    HALF_TROLLEY = "half-trolley"
    FOOD_CONTAINER = "food-container"
    SERVICE_CONTAINER = "service-container"


class UnknownEquipmentKind(ValueError):
    """Raised when an identifier does not name a catalog entry."""


@dataclass(frozen=True)
class EquipmentSpec:
    kind: EquipmentKind
    name: str
    description: str
    required_seals: int
    report_label: str


_CATALOG: tuple[EquipmentSpec, ...] = (
    EquipmentSpec(
        kind=EquipmentKind.FULL_TROLLEY,
        name="Full-Size Trolley",
        description="2 doors, requires 2 seals",
        required_seals=2,
        report_label="Full Size Trolley",
    ),
    EquipmentSpec(
        kind=EquipmentKind.HALF_TROLLEY,
        name="Half-Size Trolley",
        description="1 door, requires 1 seal",
        required_seals=1,
        report_label="Half Size Trolley",
    ),
    EquipmentSpec(
        kind=EquipmentKind.FOOD_CONTAINER,
        name="Food Container",
        description="1 door, requires 1 seal",
        required_seals=1,
        report_label="Food Container",
    ),
    EquipmentSpec(
        kind=EquipmentKind.SERVICE_CONTAINER,
        name="Service Container",
        description="1 door, requires 1 seal",
        required_seals=1,
        report_label="Service Container",
    ),
)

_BY_KIND = {spec.kind: spec for spec in _CATALOG}


def catalog() -> tuple[EquipmentSpec, ...]:
    """Return every equipment entry in catalog order."""

    return _CATALOG


def kind_of(identifier: str | EquipmentKind) -> EquipmentKind:
    try:
        return EquipmentKind(identifier)
    except ValueError:
        raise UnknownEquipmentKind(f"Unknown equipment kind: {identifier!r}") from None


def spec_for(kind: str | EquipmentKind) -> EquipmentSpec:
    return _BY_KIND[kind_of(kind)]


def required_seals(kind: str | EquipmentKind) -> int:
    return spec_for(kind).required_seals


def display_name(kind: str | EquipmentKind) -> str:
    return spec_for(kind).name


def catalog_position(kind: str | EquipmentKind) -> int:
    return _CATALOG.index(spec_for(kind))


__all__ = [
    "EquipmentKind",
    "EquipmentSpec",
    "UnknownEquipmentKind",
    "catalog",
    "catalog_position",
    "display_name",
    "kind_of",
    "required_seals",
    "spec_for",
]
