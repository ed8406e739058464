"""Static evolution definitions for every piece type."""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from .types import Evolution, EvolutionEffect, EvolutionRequirement, PieceType, Rarity


def _add(target: str, value: float) -> EvolutionEffect:
    return EvolutionEffect("attribute", target, value, "add")


def _mul(target: str, value: float) -> EvolutionEffect:
    return EvolutionEffect("attribute", target, value, "multiply")


def _set(target: str, value: object) -> EvolutionEffect:
    return EvolutionEffect("attribute", target, value, "set")


def _ability(ability_id: str) -> EvolutionEffect:
    return EvolutionEffect("ability", ability_id, True, "unlock")


def _after(evolution_id: str) -> EvolutionRequirement:
    return EvolutionRequirement("evolution", evolution_id, 1, ">=")


def _level(minimum: int) -> EvolutionRequirement:
    return EvolutionRequirement("level", "evolution_level", minimum, ">=")


def _evo(
    evolution_id: str,
    name: str,
    description: str,
    piece_type: PieceType,
    tier: int,
    rarity: Rarity,
    cost: Dict[str, float],
    effects: Tuple[EvolutionEffect, ...],
    requirements: Tuple[EvolutionRequirement, ...] = (),
    parent: Optional[str] = None,
    theme: str = "hybrid",
) -> Evolution:
    return Evolution(
        id=evolution_id,
        name=name,
        description=description,
        piece_type=piece_type,
        cost=cost,
        effects=effects,
        requirements=requirements,
        tier=tier,
        rarity=rarity,
        parent_id=parent,
        theme=theme,
    )


_P = PieceType.PAWN
_N = PieceType.KNIGHT
_B = PieceType.BISHOP
_R = PieceType.ROOK
_Q = PieceType.QUEEN
_K = PieceType.KING

PAWN_EVOLUTIONS: Tuple[Evolution, ...] = (
    _evo(
        "pawn_swift_march", "Swift March",
        "Increases movement speed and initial advance capability",
        _P, 1, Rarity.COMMON, {"temporal_essence": 25, "mnemonic_dust": 10},
        (_add("march_speed", 1), _set("initial_advance", 3)),
        theme="offensive",
    ),
    _evo(
        "pawn_resilient_core", "Resilient Core",
        "Enhances defensive capabilities and survival instincts",
        _P, 1, Rarity.COMMON, {"temporal_essence": 20, "mnemonic_dust": 15},
        (_add("resilience", 1), _add("defense", 0.5)),
        theme="defensive",
    ),
    _evo(
        "pawn_vanguard", "Vanguard Leader",
        "Leads the charge with enhanced offensive capabilities",
        _P, 2, Rarity.UNCOMMON,
        {"temporal_essence": 50, "mnemonic_dust": 25, "arcane_mana": 10},
        (_mul("attack_power", 1.5), _ability("charge_attack")),
        (_after("pawn_swift_march"),), parent="pawn_swift_march", theme="offensive",
    ),
    _evo(
        "pawn_scout", "Battlefield Scout",
        "Enhanced mobility and reconnaissance abilities",
        _P, 2, Rarity.UNCOMMON, {"temporal_essence": 45, "mnemonic_dust": 30},
        (_add("move_range", 2), _ability("breakthrough")),
        (_after("pawn_swift_march"),), parent="pawn_swift_march", theme="utility",
    ),
    _evo(
        "pawn_guardian", "Shield Guardian",
        "Protects adjacent allies with defensive auras",
        _P, 2, Rarity.UNCOMMON,
        {"temporal_essence": 40, "mnemonic_dust": 35, "arcane_mana": 15},
        (_set("synergy_radius", 2), _ability("protective-aura")),
        (_after("pawn_resilient_core"),), parent="pawn_resilient_core", theme="defensive",
    ),
    _evo(
        "pawn_fortress", "Mobile Fortress",
        "Becomes a defensive anchor point",
        _P, 2, Rarity.UNCOMMON,
        {"temporal_essence": 35, "mnemonic_dust": 40, "arcane_mana": 5},
        (_add("defense", 2), _ability("immobilize-resist")),
        (_after("pawn_resilient_core"),), parent="pawn_resilient_core", theme="defensive",
    ),
    _evo(
        "pawn_berserker", "Temporal Berserker",
        "Channels temporal fury into devastating strikes",
        _P, 3, Rarity.RARE,
        {"temporal_essence": 100, "mnemonic_dust": 50, "arcane_mana": 25, "aether_shards": 2},
        (_mul("attack_power", 2), _ability("berserker-rage")),
        (_after("pawn_vanguard"), _level(10)), parent="pawn_vanguard", theme="offensive",
    ),
    _evo(
        "pawn_infiltrator", "Shadow Infiltrator",
        "Slips through enemy lines unseen",
        _P, 3, Rarity.RARE,
        {"temporal_essence": 80, "mnemonic_dust": 60, "arcane_mana": 40, "aether_shards": 1},
        (_ability("phase-through"), _ability("backstab")),
        (_after("pawn_scout"), _level(8)), parent="pawn_scout", theme="utility",
    ),
    _evo(
        "pawn_paladin", "Chronos Paladin",
        "Heals allies and wards them against time",
        _P, 3, Rarity.RARE,
        {"temporal_essence": 75, "mnemonic_dust": 75, "arcane_mana": 50, "aether_shards": 2},
        (_ability("heal-allies"), _ability("time-ward")),
        (_after("pawn_guardian"), _level(12)), parent="pawn_guardian", theme="defensive",
    ),
    _evo(
        "pawn_citadel", "Temporal Citadel",
        "Anchors a zone of temporal control",
        _P, 3, Rarity.EPIC,
        {"temporal_essence": 120, "mnemonic_dust": 80, "arcane_mana": 30, "aether_shards": 3},
        (_ability("zone-control"), _set("synergy_radius", 3)),
        (_after("pawn_fortress"), _level(15)), parent="pawn_fortress", theme="defensive",
    ),
)

KNIGHT_EVOLUTIONS: Tuple[Evolution, ...] = (
    _evo(
        "knight_dash_master", "Dash Master",
        "Improves dash chance and shortens its cooldown",
        _N, 1, Rarity.COMMON, {"temporal_essence": 30, "mnemonic_dust": 20},
        (_add("dash_chance", 0.1), _add("dash_cooldown", -1)),
        theme="offensive",
    ),
    _evo(
        "knight_tactical_mind", "Tactical Mind",
        "Reads the board several moves ahead",
        _N, 1, Rarity.COMMON, {"temporal_essence": 25, "mnemonic_dust": 25},
        (_add("strategic_value", 1), _ability("predict-moves")),
        theme="utility",
    ),
    _evo(
        "knight_blitz", "Blitz Striker",
        "Strikes repeatedly before the enemy can react",
        _N, 2, Rarity.UNCOMMON,
        {"temporal_essence": 60, "mnemonic_dust": 40, "arcane_mana": 20},
        (_ability("knight-dash"), _mul("attack_speed", 1.5)),
        (_after("knight_dash_master"),), parent="knight_dash_master", theme="offensive",
    ),
    _evo(
        "knight_cavalry", "Cavalry Unit",
        "Extends the knight's reach across the board",
        _N, 2, Rarity.UNCOMMON, {"temporal_essence": 55, "mnemonic_dust": 45},
        (_ability("extended-range"), _add("move_range", 1)),
        (_after("knight_dash_master"),), parent="knight_dash_master", theme="offensive",
    ),
    _evo(
        "knight_commander", "Battle Commander",
        "Inspires nearby allies",
        _N, 2, Rarity.RARE,
        {"temporal_essence": 70, "mnemonic_dust": 50, "arcane_mana": 25},
        (_ability("command-aura"), _mul("ally_bonus", 1.2)),
        (_after("knight_tactical_mind"),), parent="knight_tactical_mind", theme="hybrid",
    ),
    _evo(
        "knight_scout", "Reconnaissance Expert",
        "Sees further across the battlefield",
        _N, 2, Rarity.UNCOMMON,
        {"temporal_essence": 50, "mnemonic_dust": 35, "arcane_mana": 15},
        (_ability("enhanced-vision"), _add("vision_range", 2)),
        (_after("knight_tactical_mind"),), parent="knight_tactical_mind", theme="utility",
    ),
    _evo(
        "knight_tempest", "Tempest Knight",
        "Lands strikes that ripple into adjacent squares",
        _N, 3, Rarity.EPIC,
        {"temporal_essence": 120, "mnemonic_dust": 80, "arcane_mana": 40, "aether_shards": 2},
        (_ability("area-strike"), _mul("splash_damage", 1.5)),
        (_after("knight_blitz"), _level(15)), parent="knight_blitz", theme="offensive",
    ),
    _evo(
        "knight_champion", "Champion Knight",
        "Holds ground against any assault",
        _N, 3, Rarity.RARE,
        {"temporal_essence": 90, "mnemonic_dust": 70, "arcane_mana": 35},
        (_ability("resilient-stance"), _add("defense", 2)),
        (_after("knight_cavalry"), _level(12)), parent="knight_cavalry", theme="defensive",
    ),
    _evo(
        "knight_general", "Grand General",
        "Commands the whole battlefield",
        _N, 3, Rarity.LEGENDARY,
        {"temporal_essence": 150, "mnemonic_dust": 100, "arcane_mana": 60, "aether_shards": 5},
        (_ability("battlefield-command"), _add("command_radius", 3)),
        (_after("knight_commander"), _level(20)), parent="knight_commander", theme="hybrid",
    ),
    _evo(
        "knight_infiltrator", "Shadow Rider",
        "Moves unseen and strikes critical points",
        _N, 3, Rarity.EPIC,
        {"temporal_essence": 100, "mnemonic_dust": 75, "arcane_mana": 50, "aether_shards": 3},
        (_ability("stealth-mode"), _add("critical_chance", 0.2)),
        (_after("knight_scout"), _level(18)), parent="knight_scout", theme="utility",
    ),
)

BISHOP_EVOLUTIONS: Tuple[Evolution, ...] = (
    _evo(
        "bishop_consecration", "Consecration Master",
        "Consecrates squares faster and snipes further",
        _B, 1, Rarity.COMMON, {"temporal_essence": 35, "arcane_mana": 25},
        (_add("consecration_turns", -1), _add("snipe_range", 1)),
        theme="utility",
    ),
    _evo(
        "bishop_divine", "Divine Power",
        "Channels divine mana",
        _B, 2, Rarity.UNCOMMON, {"temporal_essence": 60, "arcane_mana": 40},
        (_ability("bishop-consecrate"), _mul("mana_regen", 1.5)),
        (_after("bishop_consecration"),), parent="bishop_consecration", theme="utility",
    ),
    _evo(
        "bishop_archangel", "Archangel",
        "Intervenes to save fallen allies",
        _B, 3, Rarity.EPIC, {"temporal_essence": 120, "arcane_mana": 80, "aether_shards": 3},
        (_ability("divine-intervention"), _mul("heal_power", 2)),
        (_after("bishop_divine"), _level(15)), parent="bishop_divine", theme="defensive",
    ),
)

ROOK_EVOLUTIONS: Tuple[Evolution, ...] = (
    _evo(
        "rook_entrenchment", "Entrenchment Specialist",
        "Entrenches sooner and harder",
        _R, 1, Rarity.COMMON, {"temporal_essence": 40, "mnemonic_dust": 30},
        (_add("entrench_threshold", -1), _add("entrench_power", 1)),
        theme="defensive",
    ),
    _evo(
        "rook_fortress", "Fortress Core",
        "Claims and holds territory",
        _R, 2, Rarity.UNCOMMON,
        {"temporal_essence": 70, "mnemonic_dust": 50, "arcane_mana": 20},
        (_ability("rook-entrench"), _add("territory_control", 1)),
        (_after("rook_entrenchment"),), parent="rook_entrenchment", theme="defensive",
    ),
    _evo(
        "rook_citadel", "Citadel Guardian",
        "Projects control over a wide radius",
        _R, 3, Rarity.RARE,
        {"temporal_essence": 100, "mnemonic_dust": 75, "arcane_mana": 40, "aether_shards": 2},
        (_ability("zone-control"), _add("control_radius", 2)),
        (_after("rook_fortress"), _level(12)), parent="rook_fortress", theme="defensive",
    ),
)

QUEEN_EVOLUTIONS: Tuple[Evolution, ...] = (
    _evo(
        "queen_dominance", "Dominance Aura",
        "Extends the queen's aura and mana flow",
        _Q, 1, Rarity.UNCOMMON, {"temporal_essence": 60, "arcane_mana": 40},
        (_add("dominance_aura_range", 1), _add("mana_regen_bonus", 0.1)),
        theme="offensive",
    ),
    _evo(
        "queen_empress", "Empress Command",
        "Commands lesser pieces with authority",
        _Q, 2, Rarity.RARE, {"temporal_essence": 90, "arcane_mana": 60, "aether_shards": 1},
        (_ability("queen-dominance"), _mul("command_strength", 1.5)),
        (_after("queen_dominance"),), parent="queen_dominance", theme="hybrid",
    ),
    _evo(
        "queen_goddess", "Goddess Ascension",
        "Ascends beyond mortal limits",
        _Q, 3, Rarity.LEGENDARY,
        {"temporal_essence": 150, "arcane_mana": 100, "aether_shards": 5},
        (_ability("divine-authority"), _mul("ultimate_power", 3)),
        (_after("queen_empress"), _level(20)), parent="queen_empress", theme="offensive",
    ),
)

KING_EVOLUTIONS: Tuple[Evolution, ...] = (
    _evo(
        "king_decree", "Royal Decree",
        "Issues decrees and resists defeat",
        _K, 1, Rarity.RARE, {"temporal_essence": 80, "mnemonic_dust": 60, "aether_shards": 1},
        (_add("royal_decree_uses", 1), _add("last_stand_threshold", 0.05)),
        theme="utility",
    ),
    _evo(
        "king_emperor", "Emperor Ascension",
        "Surrounds the king with an imperial guard",
        _K, 2, Rarity.EPIC,
        {"temporal_essence": 120, "mnemonic_dust": 90, "arcane_mana": 50, "aether_shards": 3},
        (_ability("imperial-guard"), _add("protection_radius", 2)),
        (_after("king_decree"),), parent="king_decree", theme="defensive",
    ),
    _evo(
        "king_divine", "Divine King",
        "Becomes untouchable",
        _K, 3, Rarity.LEGENDARY,
        {"temporal_essence": 200, "mnemonic_dust": 150, "arcane_mana": 100, "aether_shards": 10},
        (_ability("divine-protection"), _set("immortal", True)),
        (_after("king_emperor"), _level(25)), parent="king_emperor", theme="defensive",
    ),
)

EVOLUTION_CATALOG: Dict[PieceType, Tuple[Evolution, ...]] = {
    PieceType.PAWN: PAWN_EVOLUTIONS,
    PieceType.ROOK: ROOK_EVOLUTIONS,
    PieceType.KNIGHT: KNIGHT_EVOLUTIONS,
    PieceType.BISHOP: BISHOP_EVOLUTIONS,
    PieceType.QUEEN: QUEEN_EVOLUTIONS,
    PieceType.KING: KING_EVOLUTIONS,
}


__all__ = [
    "BISHOP_EVOLUTIONS",
    "EVOLUTION_CATALOG",
    "KING_EVOLUTIONS",
    "KNIGHT_EVOLUTIONS",
    "PAWN_EVOLUTIONS",
    "QUEEN_EVOLUTIONS",
    "ROOK_EVOLUTIONS",
]
