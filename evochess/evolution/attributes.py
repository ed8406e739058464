"""Per-piece attribute schema and value records."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from .types import PieceType

AttributeValue = Union[int, float, bool]


class AttributeKind(Enum):
    NUMERIC = "numeric"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class AttributeSpec:
    name: str
    kind: AttributeKind
    default: AttributeValue

    def coerce(self, value: Any) -> AttributeValue:
        """Convert ``value`` to the declared kind, falling back to the default."""

        if self.kind is AttributeKind.BOOLEAN:
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if isinstance(value, bool):
            return self.default
        try:
            number = float(value)
        except (TypeError, ValueError):
            return self.default
        return int(number) if number.is_integer() else number


def _numeric(name: str, default: float) -> AttributeSpec:
    return AttributeSpec(name, AttributeKind.NUMERIC, default)


def _flag(name: str, default: bool) -> AttributeSpec:
    return AttributeSpec(name, AttributeKind.BOOLEAN, default)


# Shared fields in display order:
# move_range, move_speed, can_jump, can_move_backward, attack_power, defense,
# capture_bonus, elegance_multiplier, resource_generation, synergy_radius,
# evolution_efficiency, ability_slots
_BASE_TABLE: Dict[PieceType, Tuple[Any, ...]] = {
    PieceType.PAWN: (1, 1, False, False, 1, 1, 1, 1, 1, 1, 1, 1),
    PieceType.ROOK: (8, 2, False, True, 5, 4, 2, 1.2, 2, 2, 1.1, 2),
    PieceType.KNIGHT: (3, 3, True, True, 3, 3, 3, 1.5, 1.5, 2, 1.3, 3),
    PieceType.BISHOP: (8, 2, False, True, 3, 3, 2, 1.3, 1.8, 3, 1.2, 2),
    PieceType.QUEEN: (8, 3, False, True, 9, 5, 4, 2, 3, 4, 1.5, 4),
    PieceType.KING: (1, 1, False, True, 2, 10, 1, 3, 2, 5, 2, 5),
}

_SHARED_FIELDS: Tuple[Tuple[str, AttributeKind], ...] = (
    ("move_range", AttributeKind.NUMERIC),
    ("move_speed", AttributeKind.NUMERIC),
    ("can_jump", AttributeKind.BOOLEAN),
    ("can_move_backward", AttributeKind.BOOLEAN),
    ("attack_power", AttributeKind.NUMERIC),
    ("defense", AttributeKind.NUMERIC),
    ("capture_bonus", AttributeKind.NUMERIC),
    ("elegance_multiplier", AttributeKind.NUMERIC),
    ("resource_generation", AttributeKind.NUMERIC),
    ("synergy_radius", AttributeKind.NUMERIC),
    ("evolution_efficiency", AttributeKind.NUMERIC),
    ("ability_slots", AttributeKind.NUMERIC),
)

_PIECE_BONUS_FIELDS: Dict[PieceType, Tuple[AttributeSpec, ...]] = {
    PieceType.PAWN: (
        _numeric("march_speed", 1),
        _numeric("resilience", 0),
        _numeric("initial_advance", 2),
    ),
    PieceType.KNIGHT: (
        _numeric("dash_chance", 0.0),
        _numeric("dash_cooldown", 5),
        _numeric("strategic_value", 0),
        _numeric("attack_speed", 1),
        _numeric("ally_bonus", 1),
        _numeric("vision_range", 2),
        _numeric("splash_damage", 1),
        _numeric("command_radius", 0),
        _numeric("critical_chance", 0.0),
    ),
    PieceType.BISHOP: (
        _numeric("consecration_turns", 3),
        _numeric("snipe_range", 0),
        _numeric("mana_regen", 1),
        _numeric("heal_power", 1),
    ),
    PieceType.ROOK: (
        _numeric("entrench_threshold", 3),
        _numeric("entrench_power", 1),
        _numeric("territory_control", 0),
        _numeric("control_radius", 0),
    ),
    PieceType.QUEEN: (
        _numeric("dominance_aura_range", 0),
        _numeric("mana_regen_bonus", 0.0),
        _numeric("command_strength", 1),
        _numeric("ultimate_power", 1),
    ),
    PieceType.KING: (
        _numeric("royal_decree_uses", 0),
        _numeric("last_stand_threshold", 0.1),
        _numeric("protection_radius", 0),
        _flag("immortal", False),
    ),
}


def _build_schema(piece_type: PieceType) -> Dict[str, AttributeSpec]:
    schema: Dict[str, AttributeSpec] = {}
    for (name, kind), default in zip(_SHARED_FIELDS, _BASE_TABLE[piece_type]):
        schema[name] = AttributeSpec(name, kind, default)
    for spec in _PIECE_BONUS_FIELDS.get(piece_type, ()):
        schema[spec.name] = spec
    return schema


ATTRIBUTE_SCHEMAS: Dict[PieceType, Dict[str, AttributeSpec]] = {
    piece_type: _build_schema(piece_type) for piece_type in PieceType
}


def schema_for(piece_type: PieceType) -> Dict[str, AttributeSpec]:
    return ATTRIBUTE_SCHEMAS[piece_type]


class PieceAttributes:
    """Fixed-shape attribute record resolved from a piece schema."""

    def __init__(
        self,
        piece_type: PieceType,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.piece_type = piece_type
        self._schema = schema_for(piece_type)
        self._values: Dict[str, AttributeValue] = {
            name: spec.coerce(spec.default) for name, spec in self._schema.items()
        }
        if overrides:
            for name, value in overrides.items():
                spec = self._schema.get(name)
                if spec is not None:
                    self._values[name] = spec.coerce(value)

    def __getitem__(self, name: str) -> AttributeValue:
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PieceAttributes):
            return NotImplemented
        return self.piece_type == other.piece_type and self._values == other._values

    def __repr__(self) -> str:
        return f"PieceAttributes({self.piece_type.name}, {self._values!r})"

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def kind_of(self, name: str) -> Optional[AttributeKind]:
        spec = self._schema.get(name)
        return spec.kind if spec else None

    def is_numeric(self, name: str) -> bool:
        return self.kind_of(name) is AttributeKind.NUMERIC

    def set(self, name: str, value: Any) -> bool:
        spec = self._schema.get(name)
        if spec is None:
            return False
        self._values[name] = spec.coerce(value)
        return True

    def numeric_items(self) -> Iterator[Tuple[str, float]]:
        for name, value in self._values.items():
            if self._schema[name].kind is AttributeKind.NUMERIC:
                yield name, value

    def as_dict(self) -> Dict[str, AttributeValue]:
        return dict(self._values)


__all__ = [
    "ATTRIBUTE_SCHEMAS",
    "AttributeKind",
    "AttributeSpec",
    "PieceAttributes",
    "schema_for",
]
