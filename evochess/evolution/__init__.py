"""Evolution trees, costs, live piece state and persistence."""
from __future__ import annotations

from .costs import CostCalculator, CostScaling
from .piece import PieceEvolution
from .save import SAVE_VERSION, LoadReport, SaveDataError, verify_checksum
from .system import EvolutionSystem, ResourceLedger
from .trees import EvolutionNode, EvolutionTree
from .types import (
    Ability,
    CombinationRecord,
    Evolution,
    EvolutionEffect,
    EvolutionRequirement,
    EvolutionSaveData,
    PieceType,
    Rarity,
    SynergyBonus,
    VisualModification,
)

__all__ = [
    "Ability",
    "CombinationRecord",
    "CostCalculator",
    "CostScaling",
    "Evolution",
    "EvolutionEffect",
    "EvolutionNode",
    "EvolutionRequirement",
    "EvolutionSaveData",
    "EvolutionSystem",
    "EvolutionTree",
    "LoadReport",
    "PieceEvolution",
    "PieceType",
    "Rarity",
    "ResourceLedger",
    "SAVE_VERSION",
    "SaveDataError",
    "SynergyBonus",
    "VisualModification",
    "verify_checksum",
]
