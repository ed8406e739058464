"""Unit tests for evolution pricing."""
from __future__ import annotations

import json
import math
from math import isclose
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evochess.engine.clock import MS_PER_HOUR
from evochess.evolution.costs import CostCalculator, CostScaling
from evochess.evolution.types import Evolution, PieceType, Rarity


def make_evolution(
    tier: int = 1,
    rarity: Rarity = Rarity.COMMON,
    cost=None,
    evolution_id: str = "test_evolution",
) -> Evolution:
    return Evolution(
        id=evolution_id,
        name="Test",
        description="",
        piece_type=PieceType.PAWN,
        cost=cost if cost is not None else {"temporal_essence": 100, "mnemonic_dust": 50},
        tier=tier,
        rarity=rarity,
    )


def test_common_tier_one_base_cost_is_unchanged() -> None:
    calculator = CostCalculator()
    base = calculator.calculate_base_cost(make_evolution())
    assert base == {"temporal_essence": 100, "mnemonic_dust": 50}


def test_base_cost_applies_rarity_and_tier_growth() -> None:
    calculator = CostCalculator()
    base = calculator.calculate_base_cost(make_evolution(tier=3, rarity=Rarity.RARE))
    assert base == {"temporal_essence": 1000, "mnemonic_dust": 500}


def test_base_cost_floors_fractional_amounts() -> None:
    calculator = CostCalculator()
    base = calculator.calculate_base_cost(
        make_evolution(rarity=Rarity.UNCOMMON, cost={"arcane_mana": 7})
    )
    assert base == {"arcane_mana": 10}


def test_base_cost_with_empty_cost_is_empty() -> None:
    calculator = CostCalculator()
    assert calculator.calculate_base_cost(make_evolution(cost={})) == {}


def test_scaled_cost_at_level_one() -> None:
    calculator = CostCalculator()
    scaled = calculator.calculate_scaled_cost(make_evolution(), 1)
    assert scaled == {"temporal_essence": 150, "mnemonic_dust": 75}


def test_scaled_cost_grows_with_level() -> None:
    calculator = CostCalculator()
    scaled = calculator.calculate_scaled_cost(make_evolution(), 2)
    assert scaled["temporal_essence"] == math.floor(100 * 2 ** 1.2 * 1.5)
    assert scaled["mnemonic_dust"] == math.floor(50 * 2 ** 1.2 * 1.5)


def test_scaled_cost_clamps_level_below_one() -> None:
    calculator = CostCalculator()
    evolution = make_evolution()
    assert calculator.calculate_scaled_cost(evolution, 0) == calculator.calculate_scaled_cost(
        evolution, 1
    )


def test_bulk_discount_steps_and_floor() -> None:
    calculator = CostCalculator()
    assert calculator.calculate_bulk_discount([]) == 1.0
    assert calculator.calculate_bulk_discount([make_evolution()]) == 1.0
    assert isclose(calculator.calculate_bulk_discount([make_evolution()] * 5), 0.8)
    assert isclose(calculator.calculate_bulk_discount([make_evolution()] * 11), 0.5)
    assert isclose(calculator.calculate_bulk_discount([make_evolution()] * 40), 0.5)


def test_time_bonus_decays_to_floor() -> None:
    calculator = CostCalculator()
    assert calculator.calculate_time_bonus(0) == 1.0
    assert calculator.calculate_time_bonus(-500) == 1.0
    assert isclose(calculator.calculate_time_bonus(MS_PER_HOUR), 0.95)
    assert isclose(calculator.calculate_time_bonus(1000 * MS_PER_HOUR), 0.1)


def test_batch_cost_combines_discount_and_time_bonus() -> None:
    calculator = CostCalculator()
    evolutions = [make_evolution(evolution_id=f"evo_{index}") for index in range(5)]
    quote = calculator.calculate_batch_cost(evolutions, level=1, elapsed_ms=MS_PER_HOUR)
    factor = 0.8 * 0.95
    assert quote["temporal_essence"] == math.floor(750 * factor)
    assert quote["mnemonic_dust"] == math.floor(375 * factor)


def test_scaling_from_settings(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "evolutionCosts": {
                    "baseMultiplier": 2,
                    "levelMultiplier": 1.0,
                    "rarityMultiplier": {"rare": 3},
                    "unknownKnob": 4,
                }
            }
        )
    )
    scaling = CostScaling.from_settings(path)
    assert scaling.base_multiplier == 2.0
    assert scaling.rarity_multiplier["rare"] == 3.0
    assert scaling.rarity_multiplier["common"] == 1.0
    calculator = CostCalculator(scaling)
    assert calculator.calculate_scaled_cost(make_evolution(), 1) == {
        "temporal_essence": 200,
        "mnemonic_dust": 100,
    }


def test_scaling_defaults_on_missing_or_broken_settings(tmp_path) -> None:
    assert CostScaling.from_settings(tmp_path / "missing.json") == CostScaling()
    broken = tmp_path / "settings.json"
    broken.write_text("{not json")
    assert CostScaling.from_settings(broken) == CostScaling()


def test_malformed_inputs_fall_back_to_clamps() -> None:
    calculator = CostCalculator()
    no_tier = make_evolution(tier=None)
    assert calculator.calculate_base_cost(no_tier) == {"temporal_essence": 100, "mnemonic_dust": 50}
    assert calculator.calculate_base_cost(make_evolution(tier="high")) == calculator.calculate_base_cost(
        make_evolution()
    )

    evolution = make_evolution()
    level_one = calculator.calculate_scaled_cost(evolution, 1)
    assert calculator.calculate_scaled_cost(evolution, None) == level_one
    assert calculator.calculate_scaled_cost(evolution, "ten") == level_one
    assert calculator.calculate_scaled_cost(evolution, float("nan")) == level_one

    assert calculator.calculate_time_bonus(None) == 1.0
    assert calculator.calculate_time_bonus("soon") == 1.0
    assert calculator.calculate_bulk_discount(None) == 1.0
    assert calculator.calculate_batch_cost(None) == {}
