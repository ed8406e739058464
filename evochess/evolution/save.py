"""Save-data encoding, decoding and integrity checks."""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from .piece import PieceEvolution
from .types import CombinationRecord, EvolutionSaveData, PieceType

SAVE_VERSION = "1.0.0"

SaveInput = Union[EvolutionSaveData, Mapping[str, Any], None]


class SaveDataError(ValueError):
    """Raised when a save payload contains a record that cannot be decoded."""


@dataclass
class LoadReport:
    """Outcome of a load, handed back to the persistence collaborator."""

    applied: bool
    checksum_valid: bool
    version: str = ""
    evolutions_loaded: int = 0
    combinations_loaded: int = 0
    error: Optional[str] = None


def _canonical(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def compute_checksum(save: EvolutionSaveData) -> str:
    """Integrity digest over every field except the checksum itself."""

    return hashlib.sha256(_canonical(save.payload()).encode("utf-8")).hexdigest()


def verify_checksum(save: EvolutionSaveData) -> bool:
    return bool(save.checksum) and save.checksum == compute_checksum(save)


def is_empty(save: EvolutionSaveData) -> bool:
    return (
        not save.evolutions
        and not save.combinations
        and not save.unlocked_nodes
        and save.total_combinations in ("", "0")
    )


def coerce_save_data(data: SaveInput) -> EvolutionSaveData:
    if isinstance(data, EvolutionSaveData):
        return data
    if data is not None and not isinstance(data, Mapping):
        raise SaveDataError(f"Unsupported save payload type {type(data).__name__}")
    try:
        return EvolutionSaveData.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise SaveDataError(f"Malformed save payload: {exc}") from exc


def encode_combination(record: CombinationRecord) -> dict:
    return record.as_dict()


def decode_combination(data: Mapping[str, Any]) -> CombinationRecord:
    try:
        return CombinationRecord(
            id=str(data["id"]),
            combination_hash=str(data.get("combinationHash", data["id"])),
            piece_evolution_ids=tuple(str(item) for item in data.get("pieceEvolutionIds") or ()),
            total_power=float(data.get("totalPower", 0.0)),
            discovered_at=int(data.get("discoveredAt", 0)),
            piece_types=tuple(PieceType.coerce(item) for item in data.get("pieceTypes") or ()),
            synergy_ids=tuple(str(item) for item in data.get("synergyIds") or ()),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SaveDataError(f"Malformed combination record: {exc}") from exc


def decode_evolutions(records: Iterable[Mapping[str, Any]]) -> List[PieceEvolution]:
    evolutions: List[PieceEvolution] = []
    for record in records:
        try:
            evolutions.append(PieceEvolution.from_dict(record))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SaveDataError(f"Malformed evolution record: {exc}") from exc
    return evolutions


def decode_total(text: str) -> int:
    try:
        total = int(str(text).strip() or "0")
    except ValueError as exc:
        raise SaveDataError(f"Invalid combination total {text!r}") from exc
    if total < 0:
        raise SaveDataError(f"Negative combination total {total}")
    return total


__all__ = [
    "LoadReport",
    "SAVE_VERSION",
    "SaveDataError",
    "SaveInput",
    "coerce_save_data",
    "compute_checksum",
    "decode_combination",
    "decode_evolutions",
    "decode_total",
    "encode_combination",
    "is_empty",
    "verify_checksum",
]
