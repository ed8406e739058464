"""Live evolution state for a single piece type."""
from __future__ import annotations

import hashlib
import json
import random
import string
from typing import Any, Dict, List, Mapping, Optional

from evochess.engine.clock import now_ms

from .attributes import PieceAttributes
from .types import (
    Ability,
    EvolutionEffect,
    PieceType,
    ResourceCost,
    VisualModification,
    add_costs,
    empty_investment,
    normalise_cost,
)

ABILITY_WEIGHT = 10
LEVEL_WEIGHT = 5

_ID_ALPHABET = string.ascii_lowercase + string.digits
_id_rng = random.Random()


def _generate_id() -> str:
    suffix = "".join(_id_rng.choices(_ID_ALPHABET, k=9))
    return f"{now_ms()}-{suffix}"


class PieceEvolution:
    """Mutable upgrade state for one evolved piece type."""

    def __init__(
        self,
        piece_type: PieceType,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.id = _generate_id()
        self.piece_type = PieceType.coerce(piece_type)
        self.attributes = PieceAttributes(self.piece_type, overrides)
        self.unlocked_abilities: List[Ability] = []
        self.visual_modifications: List[VisualModification] = []
        self.evolution_level = 1
        self.total_investment: ResourceCost = empty_investment()
        self.time_invested = 0
        self.created_at = now_ms()
        self.last_modified = self.created_at

    def _touch(self) -> None:
        self.last_modified = max(self.last_modified, now_ms())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def upgrade_attribute(self, name: str, delta: int, cost: Mapping[str, float]) -> bool:
        """Raise a numeric attribute by ``delta`` levels; flags are not upgradable."""

        if not self.attributes.is_numeric(name):
            return False
        if self.evolution_level + delta < 1:
            return False
        value = self.attributes[name] + delta
        if not self._fits_slots(name, value):
            return False
        self.attributes.set(name, value)
        self.evolution_level += delta
        self.record_investment(cost)
        return True

    def record_investment(self, cost: Mapping[str, float]) -> None:
        self.total_investment = add_costs(self.total_investment, cost)
        self._touch()

    def add_time_investment(self, milliseconds: float) -> None:
        self.time_invested += max(0, milliseconds)
        self._touch()

    def _fits_slots(self, name: str, value: Any) -> bool:
        if name != "ability_slots":
            return True
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return value >= len(self.unlocked_abilities)

    def unlock_ability(self, ability: Ability) -> bool:
        if len(self.unlocked_abilities) >= self.attributes.get("ability_slots", 0):
            return False
        self.unlocked_abilities.append(ability)
        self._touch()
        return True

    def add_visual_modification(self, mod: VisualModification) -> None:
        self.visual_modifications.append(mod)
        self._touch()

    def apply_effect(self, effect: EvolutionEffect) -> bool:
        """Apply a single evolution effect; returns whether anything changed."""

        if effect.kind == "attribute":
            return self._apply_attribute_effect(effect)
        if effect.kind == "ability" and effect.operation == "unlock":
            if isinstance(effect.value, Ability):
                ability = effect.value
            else:
                ability = Ability(id=effect.target, name=effect.target.replace("-", " ").title())
            if self.has_ability(ability.id):
                return False
            return self.unlock_ability(ability)
        if effect.kind == "visual" and effect.operation == "unlock":
            if isinstance(effect.value, VisualModification):
                mod = effect.value
            else:
                mod = VisualModification(kind=effect.target, value=effect.value)
            self.add_visual_modification(mod)
            return True
        # Synergy effects resolve at board level, outside a single piece.
        return False

    def _apply_attribute_effect(self, effect: EvolutionEffect) -> bool:
        name = effect.target
        if name not in self.attributes:
            return False
        if effect.operation == "set":
            value = effect.value
        elif not self.attributes.is_numeric(name) or isinstance(effect.value, bool):
            return False
        elif effect.operation == "add":
            value = self.attributes[name] + effect.value
        elif effect.operation == "multiply":
            value = self.attributes[name] * effect.value
        else:
            return False
        if not self._fits_slots(name, value):
            return False
        changed = self.attributes.set(name, value)
        if changed:
            self._touch()
        return changed

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    def has_ability(self, ability_id: str) -> bool:
        return any(ability.id == ability_id for ability in self.unlocked_abilities)

    def calculate_power_score(self) -> float:
        attribute_score = sum(value for _, value in self.attributes.numeric_items())
        ability_score = len(self.unlocked_abilities) * ABILITY_WEIGHT
        level_bonus = self.evolution_level * LEVEL_WEIGHT
        return attribute_score + ability_score + level_bonus

    def generate_hash(self) -> str:
        data = {
            "pieceType": self.piece_type.value,
            "attributes": self.attributes.as_dict(),
            "abilities": sorted(ability.id for ability in self.unlocked_abilities),
        }
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha1(canonical.encode("utf-8")).hexdigest()

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def copy(self) -> "PieceEvolution":
        return PieceEvolution.from_dict(self.as_dict())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "pieceType": self.piece_type.value,
            "attributes": self.attributes.as_dict(),
            "unlockedAbilities": [ability.as_dict() for ability in self.unlocked_abilities],
            "visualModifications": [mod.as_dict() for mod in self.visual_modifications],
            "evolutionLevel": self.evolution_level,
            "totalInvestment": dict(self.total_investment),
            "timeInvested": self.time_invested,
            "createdAt": self.created_at,
            "lastModified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PieceEvolution":
        """Rebuild an instance from a snapshot without replaying its upgrades."""

        evolution = cls(PieceType.coerce(data["pieceType"]), data.get("attributes") or {})
        if data.get("id"):
            evolution.id = str(data["id"])
        evolution.unlocked_abilities = [
            Ability.from_dict(entry) for entry in data.get("unlockedAbilities") or []
        ]
        slots = evolution.attributes.get("ability_slots", 0)
        if len(evolution.unlocked_abilities) > slots:
            raise ValueError(
                f"{len(evolution.unlocked_abilities)} abilities exceed {slots} ability slots"
            )
        evolution.visual_modifications = [
            VisualModification.from_dict(entry) for entry in data.get("visualModifications") or []
        ]
        evolution.evolution_level = max(1, int(data.get("evolutionLevel", 1)))
        investment: Dict[str, float] = empty_investment()
        investment.update(normalise_cost(data.get("totalInvestment")))
        evolution.total_investment = investment
        evolution.time_invested = max(0, data.get("timeInvested", 0) or 0)
        evolution.created_at = int(data.get("createdAt") or evolution.created_at)
        evolution.last_modified = int(data.get("lastModified") or evolution.created_at)
        return evolution

    def __repr__(self) -> str:
        return (
            f"PieceEvolution(id={self.id!r}, piece_type={self.piece_type.name}, "
            f"level={self.evolution_level})"
        )


__all__ = ["ABILITY_WEIGHT", "LEVEL_WEIGHT", "PieceEvolution"]
