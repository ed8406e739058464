"""Evolution data model shared by the progression systems."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

ResourceCost = Dict[str, float]

RESOURCE_KINDS: Tuple[str, ...] = (
    "temporal_essence",
    "mnemonic_dust",
    "aether_shards",
    "arcane_mana",
)


class PieceType(str, Enum):
    PAWN = "p"
    ROOK = "r"
    KNIGHT = "n"
    BISHOP = "b"
    QUEEN = "q"
    KING = "k"

    @classmethod
    def coerce(cls, value: Any) -> "PieceType":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown piece type: {value!r}")


PIECE_ORDER: Tuple[PieceType, ...] = (
    PieceType.PAWN,
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
)


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


# ----------------------------------------------------------------------
# Resource cost helpers
# ----------------------------------------------------------------------
def normalise_cost(cost: Optional[Mapping[str, Any]]) -> ResourceCost:
    """Drop unknown kinds and clamp amounts to non-negative numbers."""

    result: ResourceCost = {}
    if not cost:
        return result
    for kind in RESOURCE_KINDS:
        if kind not in cost or cost[kind] is None:
            continue
        try:
            amount = float(cost[kind])
        except (TypeError, ValueError):
            continue
        amount = max(0.0, amount)
        result[kind] = int(amount) if amount.is_integer() else amount
    return result


def add_costs(total: Mapping[str, float], extra: Mapping[str, float]) -> ResourceCost:
    combined: ResourceCost = dict(total)
    for kind, amount in normalise_cost(extra).items():
        combined[kind] = combined.get(kind, 0) + amount
    return combined


def empty_investment() -> ResourceCost:
    return {kind: 0 for kind in RESOURCE_KINDS}


# ----------------------------------------------------------------------
# Abilities and visuals
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Ability:
    """An unlockable piece ability; pieces dedupe abilities by ``id``."""

    id: str
    name: str = ""
    description: str = ""
    kind: str = "special"
    effect: Any = True

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.kind,
            "effect": self.effect,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Ability":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            description=str(data.get("description", "")),
            kind=str(data.get("type", "special")),
            effect=data.get("effect", True),
        )


@dataclass(frozen=True)
class VisualModification:
    kind: str
    value: Any
    intensity: Optional[float] = None

    def as_dict(self) -> dict:
        return {"type": self.kind, "value": self.value, "intensity": self.intensity}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VisualModification":
        intensity = data.get("intensity")
        return cls(
            kind=str(data.get("type", "effect")),
            value=data.get("value"),
            intensity=float(intensity) if intensity is not None else None,
        )


# ----------------------------------------------------------------------
# Evolution definitions
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class EvolutionEffect:
    """One change an evolution applies when acquired."""

    kind: str
    target: str
    value: Any
    operation: str = "add"


@dataclass(frozen=True)
class EvolutionRequirement:
    """Unlock gate for an evolution definition."""

    kind: str
    key: str
    value: Any = 1
    operator: str = ">="


@dataclass(frozen=True)
class Evolution:
    """Immutable definition of a purchasable evolution."""

    id: str
    name: str
    description: str
    piece_type: PieceType
    cost: Dict[str, float]
    effects: Tuple[EvolutionEffect, ...] = ()
    requirements: Tuple[EvolutionRequirement, ...] = ()
    tier: int = 1
    rarity: Rarity = Rarity.COMMON
    parent_id: Optional[str] = None
    theme: str = "hybrid"

    def required_evolution_ids(self) -> Tuple[str, ...]:
        return tuple(req.key for req in self.requirements if req.kind == "evolution")


# ----------------------------------------------------------------------
# Combination tracking
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SynergyBonus:
    """Cross-piece bonus that activates once every listed piece is evolved enough."""

    id: str
    name: str
    description: str
    pieces: Tuple[PieceType, ...]
    min_level: int
    effects: Tuple[EvolutionEffect, ...]
    multiplier: float

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "pieces": [piece.value for piece in self.pieces],
            "minLevel": self.min_level,
            "effects": [
                {
                    "type": effect.kind,
                    "target": effect.target,
                    "value": effect.value,
                    "operation": effect.operation,
                }
                for effect in self.effects
            ],
            "multiplier": self.multiplier,
        }


@dataclass(frozen=True)
class CombinationRecord:
    """A discovered joint state across every evolved piece type."""

    id: str
    combination_hash: str
    piece_evolution_ids: Tuple[str, ...]
    total_power: float
    discovered_at: int
    piece_types: Tuple[PieceType, ...] = ()
    synergy_ids: Tuple[str, ...] = ()

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "combinationHash": self.combination_hash,
            "pieceEvolutionIds": list(self.piece_evolution_ids),
            "pieceTypes": [piece.value for piece in self.piece_types],
            "synergyIds": list(self.synergy_ids),
            "totalPower": self.total_power,
            "discoveredAt": self.discovered_at,
        }


@dataclass
class EvolutionSaveData:
    """In-memory save snapshot handed to the persistence collaborator."""

    version: str = ""
    evolutions: List[dict] = field(default_factory=list)
    combinations: List[dict] = field(default_factory=list)
    unlocked_nodes: List[str] = field(default_factory=list)
    synergy_bonuses: List[dict] = field(default_factory=list)
    total_combinations: str = "0"
    timestamp: int = 0
    checksum: str = ""

    def payload(self) -> dict:
        """Wire form without the checksum field."""

        return {
            "version": self.version,
            "evolutions": list(self.evolutions),
            "combinations": list(self.combinations),
            "unlockedNodes": list(self.unlocked_nodes),
            "synergyBonuses": list(self.synergy_bonuses),
            "totalCombinations": self.total_combinations,
            "timestamp": self.timestamp,
        }

    def as_dict(self) -> dict:
        data = self.payload()
        data["checksum"] = self.checksum
        return data

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EvolutionSaveData":
        data = data or {}
        return cls(
            version=str(data.get("version") or ""),
            evolutions=list(data.get("evolutions") or []),
            combinations=list(data.get("combinations") or []),
            unlocked_nodes=[str(node) for node in data.get("unlockedNodes") or []],
            synergy_bonuses=list(data.get("synergyBonuses") or []),
            total_combinations=str(data.get("totalCombinations") or "0"),
            timestamp=int(data.get("timestamp") or 0),
            checksum=str(data.get("checksum") or ""),
        )


__all__ = [
    "Ability",
    "CombinationRecord",
    "Evolution",
    "EvolutionEffect",
    "EvolutionRequirement",
    "EvolutionSaveData",
    "PIECE_ORDER",
    "PieceType",
    "RESOURCE_KINDS",
    "Rarity",
    "ResourceCost",
    "SynergyBonus",
    "VisualModification",
    "add_costs",
    "empty_investment",
    "normalise_cost",
]
