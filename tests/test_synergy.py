"""Tests for cross-piece synergy bonuses."""
from __future__ import annotations

import logging
from math import isclose
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evochess.engine.logger import DEFAULT_CHANNELS, GameLogger, LoggerConfig
from evochess.evolution.piece import PieceEvolution
from evochess.evolution.synergy import (
    SYNERGY_BONUSES,
    SYNERGY_MULTIPLIER,
    active_synergies,
    synergy_power_multiplier,
)
from evochess.evolution.system import EvolutionSystem
from evochess.evolution.types import PieceType


def _quiet_logger() -> GameLogger:
    channels = {name: False for name in DEFAULT_CHANNELS}
    return GameLogger(LoggerConfig(level=logging.WARNING, channels=channels))


def _piece(piece_type: PieceType, level: int) -> PieceEvolution:
    piece = PieceEvolution(piece_type)
    if level > 1:
        piece.upgrade_attribute("attack_power", level - 1, {})
    return piece


def test_synergy_multiplier_counts_piece_subsets() -> None:
    assert SYNERGY_MULTIPLIER == 64


def test_synergy_ids_are_unique() -> None:
    ids = [bonus.id for bonus in SYNERGY_BONUSES]
    assert len(ids) == len(set(ids))


def test_cavalry_charge_needs_both_pieces_at_threshold() -> None:
    assert active_synergies([_piece(PieceType.KNIGHT, 3)]) == []
    assert active_synergies([_piece(PieceType.KNIGHT, 3), _piece(PieceType.PAWN, 2)]) == []
    active = active_synergies([_piece(PieceType.KNIGHT, 3), _piece(PieceType.PAWN, 3)])
    assert [bonus.id for bonus in active] == ["cavalry-charge"]


def test_multiple_synergies_stack_multipliers() -> None:
    pieces = [_piece(PieceType.KING, 6), _piece(PieceType.QUEEN, 6), _piece(PieceType.BISHOP, 6)]
    ids = {bonus.id for bonus in active_synergies(pieces)}
    assert ids == {"royal-guard", "divine-blessing"}
    multiplier = synergy_power_multiplier(active_synergies(pieces))
    assert isclose(multiplier, 1.25 * 1.6)
    assert synergy_power_multiplier([]) == 1.0


def test_system_reports_active_synergies_in_records_and_saves() -> None:
    system = EvolutionSystem(logger=_quiet_logger())
    for _ in range(2):
        system.evolve_piece(PieceType.KNIGHT, "attack_power", {})
        system.evolve_piece(PieceType.PAWN, "attack_power", {})
    bonuses = system.calculate_synergy_bonuses()
    assert [bonus.id for bonus in bonuses] == ["cavalry-charge"]

    latest = system.get_discovered_combinations()[-1]
    assert latest.synergy_ids == ("cavalry-charge",)
    power = sum(piece.calculate_power_score() for piece in system.get_all_evolutions())
    assert isclose(latest.total_power, power * 1.5)

    save = system.serialize_evolutions()
    assert [entry["id"] for entry in save.synergy_bonuses] == ["cavalry-charge"]
    assert save.synergy_bonuses[0]["pieces"] == ["n", "p"]
