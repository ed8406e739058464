"""Cross-piece synergy bonuses."""
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .piece import PieceEvolution
from .types import EvolutionEffect, PieceType, SynergyBonus

# Number of piece types that can contribute to a synergy; each one either
# participates or not, giving 2**6 interaction patterns.
SYNERGY_MULTIPLIER = 2 ** len(PieceType)


def _bonus(target: str, ratio: float) -> EvolutionEffect:
    return EvolutionEffect("attribute_bonus", target, ratio, "multiply")


SYNERGY_BONUSES: Tuple[SynergyBonus, ...] = (
    SynergyBonus(
        id="royal-guard",
        name="Royal Guard",
        description="King and Queen synergy provides defensive bonuses",
        pieces=(PieceType.KING, PieceType.QUEEN),
        min_level=5,
        effects=(_bonus("defense", 0.25),),
        multiplier=1.25,
    ),
    SynergyBonus(
        id="cavalry-charge",
        name="Cavalry Charge",
        description="Knights sweep forward behind an advancing pawn line",
        pieces=(PieceType.KNIGHT, PieceType.PAWN),
        min_level=3,
        effects=(_bonus("move_speed", 0.5),),
        multiplier=1.5,
    ),
    SynergyBonus(
        id="fortress-wall",
        name="Fortress Wall",
        description="Rooks shield the king in a defensive formation",
        pieces=(PieceType.ROOK, PieceType.KING),
        min_level=4,
        effects=(_bonus("defense", 0.4), EvolutionEffect("resource_bonus", "temporal_essence", 0.2)),
        multiplier=1.4,
    ),
    SynergyBonus(
        id="divine-blessing",
        name="Divine Blessing",
        description="Bishop and Queen channel spiritual enhancement",
        pieces=(PieceType.BISHOP, PieceType.QUEEN),
        min_level=6,
        effects=(
            _bonus("elegance_multiplier", 0.6),
            EvolutionEffect("resource_bonus", "arcane_mana", 0.3),
        ),
        multiplier=1.6,
    ),
    SynergyBonus(
        id="pawn-storm",
        name="Pawn Storm",
        description="Evolved pawns backed by rook and knight create overwhelming pressure",
        pieces=(PieceType.PAWN, PieceType.ROOK, PieceType.KNIGHT),
        min_level=8,
        effects=(_bonus("attack_power", 0.75), EvolutionEffect("special", "breakthrough", True, "unlock")),
        multiplier=1.75,
    ),
)


def _levels_by_piece(pieces: Iterable[PieceEvolution]) -> Dict[PieceType, int]:
    levels: Dict[PieceType, int] = {}
    for piece in pieces:
        levels[piece.piece_type] = max(levels.get(piece.piece_type, 0), piece.evolution_level)
    return levels


def active_synergies(pieces: Iterable[PieceEvolution]) -> List[SynergyBonus]:
    """Return every synergy whose pieces are all evolved to its threshold."""

    levels = _levels_by_piece(pieces)
    return [
        bonus
        for bonus in SYNERGY_BONUSES
        if all(levels.get(piece, 0) >= bonus.min_level for piece in bonus.pieces)
    ]


def synergy_power_multiplier(bonuses: Iterable[SynergyBonus]) -> float:
    multiplier = 1.0
    for bonus in bonuses:
        multiplier *= bonus.multiplier
    return multiplier


__all__ = [
    "SYNERGY_BONUSES",
    "SYNERGY_MULTIPLIER",
    "active_synergies",
    "synergy_power_multiplier",
]
