"""Per-piece evolution trees and unlock evaluation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from pygame.math import Vector2

from .types import Evolution, EvolutionRequirement, PieceType

NODE_SPACING_X = 200.0
TIER_SPACING_Y = 120.0


def compare(actual: float, operator: str, expected: float) -> bool:
    if operator == ">":
        return actual > expected
    if operator == "<":
        return actual < expected
    if operator in ("=", "=="):
        return actual == expected
    if operator == ">=":
        return actual >= expected
    if operator == "<=":
        return actual <= expected
    return False


@dataclass
class RequirementContext:
    """Snapshot of the live state an unlock check is evaluated against."""

    acquired: AbstractSet[str] = frozenset()
    evolution_level: int = 1
    highest_tier: int = 0
    time_invested: float = 0.0
    attributes: Mapping[str, object] = field(default_factory=dict)

    def satisfies(self, requirement: EvolutionRequirement) -> bool:
        kind = requirement.kind
        if kind == "evolution":
            return requirement.key in self.acquired
        try:
            expected = float(requirement.value)
        except (TypeError, ValueError):
            return False
        if kind == "level":
            return compare(self.evolution_level, requirement.operator, expected)
        if kind == "tier":
            return compare(self.highest_tier, requirement.operator, expected)
        if kind == "time":
            return compare(self.time_invested, requirement.operator, expected)
        if kind == "attribute":
            value = self.attributes.get(requirement.key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return False
            return compare(value, requirement.operator, expected)
        return False


@dataclass
class EvolutionNode:
    """Read-only tree projection handed to the rendering layer."""

    evolution: Evolution
    children: List["EvolutionNode"]
    position: Vector2
    unlocked: bool
    acquired: bool = False

    @property
    def id(self) -> str:
        return self.evolution.id

    @property
    def tier(self) -> int:
        return self.evolution.tier


class EvolutionTree:
    """Static catalogue of evolutions for a single piece type."""

    def __init__(self, piece_type: PieceType, evolutions: Iterable[Evolution]) -> None:
        self.piece_type = piece_type
        self._evolutions: Dict[str, Evolution] = {}
        for evolution in evolutions:
            if evolution.piece_type != piece_type:
                raise ValueError(
                    f"Evolution {evolution.id} belongs to {evolution.piece_type.name}, "
                    f"not {piece_type.name}"
                )
            if evolution.id in self._evolutions:
                raise ValueError(f"Duplicate evolution id {evolution.id}")
            self._evolutions[evolution.id] = evolution
        self._layout = self._compute_layout()

    def __contains__(self, evolution_id: object) -> bool:
        return evolution_id in self._evolutions

    def __len__(self) -> int:
        return len(self._evolutions)

    def get(self, evolution_id: str) -> Optional[Evolution]:
        return self._evolutions.get(evolution_id)

    def evolutions(self) -> Tuple[Evolution, ...]:
        return tuple(self._evolutions.values())

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._evolutions)

    def roots(self) -> Tuple[Evolution, ...]:
        return tuple(
            evolution
            for evolution in self._evolutions.values()
            if evolution.parent_id is None or evolution.parent_id not in self._evolutions
        )

    def children_of(self, evolution_id: str) -> Tuple[Evolution, ...]:
        return tuple(
            evolution
            for evolution in self._evolutions.values()
            if evolution.parent_id == evolution_id
        )

    def nodes_at_tier(self, tier: int) -> Tuple[Evolution, ...]:
        return tuple(evolution for evolution in self._evolutions.values() if evolution.tier == tier)

    @property
    def max_tier(self) -> int:
        return max((evolution.tier for evolution in self._evolutions.values()), default=0)

    def branching_by_tier(self) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for evolution in self._evolutions.values():
            counts[evolution.tier] = counts.get(evolution.tier, 0) + 1
        return dict(sorted(counts.items()))

    def _compute_layout(self) -> Dict[str, Tuple[float, float]]:
        layout: Dict[str, Tuple[float, float]] = {}
        for tier in self.branching_by_tier():
            for index, evolution in enumerate(self.nodes_at_tier(tier)):
                layout[evolution.id] = (index * NODE_SPACING_X, (tier - 1) * TIER_SPACING_Y)
        return layout

    def build_nodes(
        self,
        is_unlocked: Callable[[Evolution], bool],
        is_acquired: Callable[[str], bool],
    ) -> List[EvolutionNode]:
        """Project the catalogue into nodes with freshly evaluated unlock flags."""

        nodes: Dict[str, EvolutionNode] = {}
        for evolution in self._evolutions.values():
            nodes[evolution.id] = EvolutionNode(
                evolution=evolution,
                children=[],
                position=Vector2(self._layout[evolution.id]),
                unlocked=evolution.tier <= 1 or is_unlocked(evolution),
                acquired=is_acquired(evolution.id),
            )
        for evolution in self._evolutions.values():
            parent = nodes.get(evolution.parent_id) if evolution.parent_id else None
            if parent is not None:
                parent.children.append(nodes[evolution.id])
        return list(nodes.values())


__all__ = [
    "EvolutionNode",
    "EvolutionTree",
    "NODE_SPACING_X",
    "RequirementContext",
    "TIER_SPACING_Y",
    "compare",
]
