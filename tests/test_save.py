"""Tests for save serialization, checksums and loading."""
from __future__ import annotations

import json
import logging
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evochess.engine.logger import DEFAULT_CHANNELS, GameLogger, LoggerConfig
from evochess.evolution.save import (
    SAVE_VERSION,
    SaveDataError,
    coerce_save_data,
    compute_checksum,
    decode_combination,
    decode_total,
    verify_checksum,
)
from evochess.evolution.system import EvolutionSystem
from evochess.evolution.types import EvolutionSaveData, PieceType


def _quiet_logger() -> GameLogger:
    channels = {name: False for name in DEFAULT_CHANNELS}
    return GameLogger(LoggerConfig(level=logging.WARNING, channels=channels))


def _system() -> EvolutionSystem:
    return EvolutionSystem(logger=_quiet_logger())


def _played_system() -> EvolutionSystem:
    system = _system()
    system.evolve_piece(PieceType.PAWN, "attack_power", {"temporal_essence": 10})
    system.evolve_piece(PieceType.PAWN, "attack_power", {"temporal_essence": 12})
    system.evolve_piece(PieceType.KNIGHT, "move_speed", {"mnemonic_dust": 4})
    system.apply_evolution(PieceType.ROOK, "rook_entrenchment")
    system.invest_time(PieceType.KNIGHT, 4200)
    return system


def _state(system: EvolutionSystem):
    return {
        piece.piece_type: (piece.attributes.as_dict(), piece.evolution_level)
        for piece in system.get_all_evolutions()
    }


def test_serialize_produces_versioned_checksummed_save() -> None:
    save = _played_system().serialize_evolutions()
    assert save.version == SAVE_VERSION
    assert save.total_combinations == "4"
    assert save.unlocked_nodes == ["rook_entrenchment"]
    assert len(save.evolutions) == 3
    assert save.checksum == compute_checksum(save)
    assert verify_checksum(save)


def test_round_trip_reproduces_state() -> None:
    played = _played_system()
    save = played.serialize_evolutions()

    restored = _system()
    report = restored.deserialize_evolutions(save)
    assert report.applied
    assert report.checksum_valid
    assert report.evolutions_loaded == 3
    assert report.combinations_loaded == 4
    assert _state(restored) == _state(played)
    assert restored.get_combination_count() == played.get_combination_count()
    assert restored.get_unlocked_evolutions() == played.get_unlocked_evolutions()
    assert restored.get_discovered_combinations() == played.get_discovered_combinations()

    again = restored.serialize_evolutions()
    assert again.evolutions == save.evolutions
    assert again.combinations == save.combinations


def test_round_trip_through_json() -> None:
    played = _played_system()
    blob = json.dumps(played.serialize_evolutions().as_dict())

    restored = _system()
    report = restored.deserialize_evolutions(json.loads(blob))
    assert report.applied
    assert report.checksum_valid
    assert _state(restored) == _state(played)


def test_restored_state_keeps_evolving() -> None:
    restored = _system()
    restored.deserialize_evolutions(_played_system().serialize_evolutions())
    assert restored.evolve_piece(PieceType.PAWN, "attack_power", {"temporal_essence": 1})
    pawns = restored.get_evolutions_by_piece_type(PieceType.PAWN)
    assert len(pawns) == 1
    assert pawns[0].evolution_level == 4
    assert restored.get_combination_count() == 5
    assert not restored.apply_evolution(PieceType.ROOK, "rook_entrenchment")


@pytest.mark.parametrize("payload", [EvolutionSaveData(), {}, None])
def test_empty_payload_resets_to_fresh_state(payload) -> None:
    system = _played_system()
    report = system.deserialize_evolutions(payload)
    assert report.applied
    assert report.checksum_valid
    assert system.get_all_evolutions() == []
    assert system.get_discovered_combinations() == []
    assert system.get_combination_count() == 0
    assert system.get_unlocked_evolutions() == ()


def test_tampered_save_loads_best_effort() -> None:
    save = _played_system().serialize_evolutions()
    save.total_combinations = "999"
    assert not verify_checksum(save)

    system = _system()
    report = system.deserialize_evolutions(save)
    assert report.applied
    assert not report.checksum_valid
    assert system.get_combination_count() == 999


def test_tampered_save_rejected_in_strict_mode() -> None:
    save = _played_system().serialize_evolutions()
    save.unlocked_nodes.append("rook_fortress")

    system = _played_system()
    before = _state(system)
    report = system.deserialize_evolutions(save, strict=True)
    assert not report.applied
    assert not report.checksum_valid
    assert report.error == "checksum mismatch"
    assert _state(system) == before
    assert system.get_unlocked_evolutions() == ("rook_entrenchment",)


def test_malformed_records_leave_state_untouched() -> None:
    system = _played_system()
    before = _state(system)
    count = system.get_combination_count()

    save = system.serialize_evolutions()
    save.evolutions.append({"pieceType": "dragon"})
    report = system.deserialize_evolutions(save)
    assert not report.applied
    assert report.error
    assert _state(system) == before
    assert system.get_combination_count() == count

    bad_total = system.serialize_evolutions()
    bad_total.total_combinations = "lots"
    assert not system.deserialize_evolutions(bad_total).applied

    assert not system.deserialize_evolutions(["not", "a", "save"]).applied
    assert system.get_combination_count() == count


def test_unknown_evolution_ids_are_dropped() -> None:
    save = _played_system().serialize_evolutions()
    save.unlocked_nodes.append("retired_evolution")
    save.checksum = compute_checksum(save)

    system = _system()
    report = system.deserialize_evolutions(save)
    assert report.applied
    assert system.get_unlocked_evolutions() == ("rook_entrenchment",)


def test_stale_version_is_reported() -> None:
    save = _played_system().serialize_evolutions()
    save.version = "0.9.0"
    save.checksum = compute_checksum(save)
    report = _system().deserialize_evolutions(save)
    assert report.applied
    assert report.version == "0.9.0"


def test_rejected_load_logs_warning(caplog) -> None:
    system = EvolutionSystem(logger=GameLogger(LoggerConfig(level=logging.DEBUG)))
    caplog.set_level(logging.WARNING, logger="evochess")
    save = system.serialize_evolutions()
    save.total_combinations = "-4"
    save.checksum = compute_checksum(save)
    report = system.deserialize_evolutions(save)
    assert not report.applied
    assert any(record.name == "evochess.persistence" for record in caplog.records)


def test_codec_helpers() -> None:
    assert decode_total("12345678901234567890123") == 12345678901234567890123
    with pytest.raises(SaveDataError):
        decode_total("-1")
    with pytest.raises(SaveDataError):
        decode_combination({"pieceEvolutionIds": []})
    with pytest.raises(SaveDataError):
        coerce_save_data(42)
    assert coerce_save_data({"totalCombinations": "7"}).total_combinations == "7"


def test_save_dict_uses_wire_keys() -> None:
    data = _played_system().serialize_evolutions().as_dict()
    assert set(data) == {
        "version",
        "evolutions",
        "combinations",
        "unlockedNodes",
        "synergyBonuses",
        "totalCombinations",
        "timestamp",
        "checksum",
    }
    assert isinstance(data["totalCombinations"], str)
    restored = EvolutionSaveData.from_dict(data)
    assert verify_checksum(restored)


def test_save_with_overfilled_ability_slots_is_rejected() -> None:
    system = _played_system()
    before = _state(system)
    save = system.serialize_evolutions()
    pawn = next(entry for entry in save.evolutions if entry["pieceType"] == "p")
    pawn["unlockedAbilities"] = [
        {"id": f"ability_{index}", "name": f"Ability {index}"} for index in range(3)
    ]
    save.checksum = compute_checksum(save)

    report = system.deserialize_evolutions(save)
    assert not report.applied
    assert report.error
    assert _state(system) == before


def test_round_trip_keeps_piece_hashes() -> None:
    played = _played_system()
    restored = _system()
    restored.deserialize_evolutions(played.serialize_evolutions())
    restored_hashes = {
        piece.piece_type: piece.generate_hash() for piece in restored.get_all_evolutions()
    }
    played_hashes = {piece.piece_type: piece.generate_hash() for piece in played.get_all_evolutions()}
    assert restored_hashes == played_hashes
