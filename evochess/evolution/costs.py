"""Evolution cost scaling formulas."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Sequence

from evochess.engine.clock import ms_to_hours
from evochess.engine.logger import ChannelLogger

from .types import Evolution, Rarity, ResourceCost, add_costs, normalise_cost


def _default_rarity_multipliers() -> Dict[str, float]:
    return {
        Rarity.COMMON.value: 1.0,
        Rarity.UNCOMMON.value: 1.5,
        Rarity.RARE.value: 2.5,
        Rarity.EPIC.value: 4.0,
        Rarity.LEGENDARY.value: 7.0,
    }


_SETTINGS_KEYS = {
    "baseMultiplier": "base_multiplier",
    "tierGrowth": "tier_growth",
    "levelExponent": "level_exponent",
    "levelMultiplier": "level_multiplier",
    "bulkDiscountStep": "bulk_discount_step",
    "bulkDiscountFloor": "bulk_discount_floor",
    "timeDecayRate": "time_decay_rate",
    "timeBonusFloor": "time_bonus_floor",
}


@dataclass
class CostScaling:
    """Tuning knobs for evolution pricing."""

    base_multiplier: float = 1.0
    rarity_multiplier: Dict[str, float] = field(default_factory=_default_rarity_multipliers)
    tier_growth: float = 2.0
    level_exponent: float = 1.2
    level_multiplier: float = 1.5
    bulk_discount_step: float = 0.05
    bulk_discount_floor: float = 0.5
    time_decay_rate: float = 0.95
    time_bonus_floor: float = 0.1

    @classmethod
    def from_settings(cls, settings_path: Path) -> "CostScaling":
        if not settings_path.exists():
            return cls()
        try:
            data = json.loads(settings_path.read_text())
        except json.JSONDecodeError:
            return cls()
        section = data.get("evolutionCosts", {})
        if not isinstance(section, dict):
            return cls()
        scaling = cls()
        known = {item.name for item in fields(cls)}
        for key, value in section.items():
            attr = _SETTINGS_KEYS.get(key, key)
            if attr not in known or attr == "rarity_multiplier":
                continue
            try:
                setattr(scaling, attr, float(value))
            except (TypeError, ValueError):
                continue
        rarities = section.get("rarityMultiplier")
        if isinstance(rarities, dict):
            for rarity, value in rarities.items():
                try:
                    scaling.rarity_multiplier[str(rarity)] = float(value)
                except (TypeError, ValueError):
                    continue
        return scaling


def _number(value: object, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


class CostCalculator:
    """Pure pricing functions; every method is total and never raises."""

    def __init__(
        self,
        scaling: Optional[CostScaling] = None,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.scaling = scaling or CostScaling()
        self._logger = logger

    def _rarity_factor(self, rarity: object) -> float:
        key = rarity.value if isinstance(rarity, Rarity) else str(rarity)
        factor = self.scaling.rarity_multiplier.get(key)
        if factor is None:
            if self._logger:
                self._logger.debug("Unknown rarity %r priced as common", rarity)
            return 1.0
        return factor

    def calculate_base_cost(self, evolution: Evolution) -> ResourceCost:
        tier = max(1, int(_number(evolution.tier, 1)))
        rarity = self._rarity_factor(evolution.rarity)
        tier_factor = self.scaling.tier_growth ** (tier - 1)
        return {
            kind: math.floor(amount * rarity * tier_factor * self.scaling.base_multiplier)
            for kind, amount in normalise_cost(evolution.cost).items()
        }

    def calculate_scaled_cost(self, evolution: Evolution, level: int) -> ResourceCost:
        # Levels below 1 would make the power term shrink or go undefined.
        level = max(1.0, _number(level, 1))
        power = level ** self.scaling.level_exponent
        base = self.calculate_base_cost(evolution)
        return {
            kind: math.floor(amount * power * self.scaling.level_multiplier)
            for kind, amount in base.items()
        }

    def calculate_bulk_discount(self, evolutions: Sequence[Evolution]) -> float:
        count = len(evolutions) if evolutions else 0
        if count <= 1:
            return 1.0
        discount = 1.0 - self.scaling.bulk_discount_step * (count - 1)
        return max(self.scaling.bulk_discount_floor, discount)

    def calculate_time_bonus(self, elapsed_ms: float) -> float:
        hours = ms_to_hours(_number(elapsed_ms, 0.0))
        if hours == 0.0:
            return 1.0
        bonus = self.scaling.time_decay_rate ** hours
        return max(self.scaling.time_bonus_floor, bonus)

    def calculate_batch_cost(
        self,
        evolutions: Sequence[Evolution],
        level: int = 1,
        elapsed_ms: float = 0.0,
    ) -> ResourceCost:
        """Quote a batch purchase with bulk discount and time bonus applied."""

        totals: ResourceCost = {}
        for evolution in evolutions or ():
            totals = add_costs(totals, self.calculate_scaled_cost(evolution, level))
        factor = self.calculate_bulk_discount(evolutions) * self.calculate_time_bonus(elapsed_ms)
        quote = {kind: math.floor(amount * factor) for kind, amount in totals.items()}
        if self._logger:
            self._logger.debug(
                "Batch quote for %d evolutions at level %s: %s (factor %.3f)",
                len(evolutions or ()),
                level,
                quote,
                factor,
            )
        return quote


__all__ = ["CostCalculator", "CostScaling"]
