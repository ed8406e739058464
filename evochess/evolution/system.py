"""Evolution orchestration: trees, live piece state, combinations and saves."""
from __future__ import annotations

import hashlib
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Set, Tuple

from evochess.engine.clock import now_ms
from evochess.engine.logger import GameLogger

from .catalog import EVOLUTION_CATALOG
from .costs import CostCalculator
from .piece import PieceEvolution
from .save import (
    SAVE_VERSION,
    LoadReport,
    SaveDataError,
    SaveInput,
    coerce_save_data,
    compute_checksum,
    decode_combination,
    decode_evolutions,
    decode_total,
    encode_combination,
    is_empty,
    verify_checksum,
)
from .synergy import SYNERGY_MULTIPLIER, active_synergies, synergy_power_multiplier
from .trees import EvolutionNode, EvolutionTree, RequirementContext
from .types import (
    PIECE_ORDER,
    RESOURCE_KINDS,
    CombinationRecord,
    Evolution,
    EvolutionSaveData,
    PieceType,
    ResourceCost,
    SynergyBonus,
)

# Distinct levels a single evolution can be pushed through.
LEVELS_PER_EVOLUTION = 100
# Upgradable axes assumed for a piece whose tree is empty.
FALLBACK_ATTRIBUTE_AXES = 10


class ResourceLedger(Protocol):
    """Player wallet owned by the progression layer."""

    def can_afford(self, cost: Mapping[str, float]) -> bool:
        ...

    def spend(self, cost: Mapping[str, float]) -> bool:
        ...


class EvolutionSystem:
    """Owns every piece evolution and the discovered-combination ledger."""

    def __init__(
        self,
        cost_calculator: Optional[CostCalculator] = None,
        logger: Optional[GameLogger] = None,
        catalog: Optional[Mapping[PieceType, Iterable[Evolution]]] = None,
    ) -> None:
        self._logger = logger or GameLogger()
        self._log = self._logger.channel("evolution")
        self._combo_log = self._logger.channel("combinations")
        self._save_log = self._logger.channel("persistence")
        self.cost_calculator = cost_calculator or CostCalculator(
            logger=self._logger.channel("costs")
        )
        catalog = catalog if catalog is not None else EVOLUTION_CATALOG
        self._trees: Dict[PieceType, EvolutionTree] = {
            piece_type: EvolutionTree(piece_type, catalog.get(piece_type, ()))
            for piece_type in PIECE_ORDER
        }
        self._check_unique_ids()
        self._evolutions: Dict[str, PieceEvolution] = {}
        self._by_piece: Dict[PieceType, str] = {}
        self._combinations: List[CombinationRecord] = []
        self._combination_hashes: Set[str] = set()
        self._combination_count = 0
        self._acquired: Dict[str, PieceType] = {}
        trees_log = self._logger.channel("trees")
        if trees_log.is_active():
            trees_log.debug(
                "Built evolution trees: %s",
                {piece.name: len(tree) for piece, tree in self._trees.items()},
            )

    def _check_unique_ids(self) -> None:
        seen: Dict[str, PieceType] = {}
        for piece_type, tree in self._trees.items():
            for evolution_id in tree.ids():
                if evolution_id in seen:
                    raise ValueError(
                        f"Evolution id {evolution_id} used by both "
                        f"{seen[evolution_id].name} and {piece_type.name}"
                    )
                seen[evolution_id] = piece_type

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def _live_piece(self, piece_type: PieceType) -> Optional[PieceEvolution]:
        evolution_id = self._by_piece.get(piece_type)
        return self._evolutions.get(evolution_id) if evolution_id else None

    def _store(self, piece: PieceEvolution) -> None:
        self._evolutions[piece.id] = piece
        self._by_piece[piece.piece_type] = piece.id

    def tree(self, piece_type: PieceType) -> EvolutionTree:
        return self._trees[PieceType.coerce(piece_type)]

    def find_evolution(self, evolution_id: str) -> Optional[Evolution]:
        for tree in self._trees.values():
            evolution = tree.get(evolution_id)
            if evolution is not None:
                return evolution
        return None

    def _context(self, piece_type: PieceType) -> RequirementContext:
        piece = self._live_piece(piece_type)
        acquired_tiers = [
            self._trees[owner].get(evolution_id).tier
            for evolution_id, owner in self._acquired.items()
            if owner == piece_type
        ]
        if piece is None:
            return RequirementContext(
                acquired=frozenset(self._acquired),
                highest_tier=max(acquired_tiers, default=0),
            )
        return RequirementContext(
            acquired=frozenset(self._acquired),
            evolution_level=piece.evolution_level,
            highest_tier=max(acquired_tiers, default=0),
            time_invested=piece.time_invested,
            attributes=piece.attributes.as_dict(),
        )

    def is_evolution_unlocked(self, evolution: Evolution) -> bool:
        if evolution.tier <= 1:
            return True
        context = self._context(evolution.piece_type)
        return all(context.satisfies(requirement) for requirement in evolution.requirements)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def evolve_piece(self, piece_type: PieceType, attribute: str, cost: Mapping[str, float]) -> bool:
        """Raise ``attribute`` of the live evolution for ``piece_type`` by one level."""

        try:
            piece_type = PieceType.coerce(piece_type)
        except ValueError:
            self._log.warning("Rejected evolution for unknown piece type %r", piece_type)
            return False
        piece = self._live_piece(piece_type)
        created = piece is None
        if piece is None:
            piece = PieceEvolution(piece_type)
        if not piece.upgrade_attribute(attribute, 1, cost):
            self._log.debug("Attribute %r is not upgradable for %s", attribute, piece_type.name)
            return False
        if created:
            self._store(piece)
        self._log.debug(
            "Evolved %s.%s to %s (level %d)",
            piece_type.name,
            attribute,
            piece.attributes[attribute],
            piece.evolution_level,
        )
        self._track_combination()
        return True

    def apply_evolution(
        self,
        piece_type: PieceType,
        evolution_id: str,
        ledger: Optional[ResourceLedger] = None,
    ) -> bool:
        """Acquire a tree evolution, charging ``ledger`` for its scaled cost if given."""

        try:
            piece_type = PieceType.coerce(piece_type)
        except ValueError:
            return False
        evolution = self._trees[piece_type].get(evolution_id)
        if evolution is None or evolution_id in self._acquired:
            return False
        if not self.is_evolution_unlocked(evolution):
            self._log.debug("Evolution %s is still locked", evolution_id)
            return False
        piece = self._live_piece(piece_type)
        created = piece is None
        if piece is None:
            piece = PieceEvolution(piece_type)
        cost = self.cost_calculator.calculate_scaled_cost(evolution, piece.evolution_level)
        if ledger is not None:
            if not ledger.can_afford(cost):
                self._log.debug("Ledger cannot afford %s: %s", evolution_id, cost)
                return False
            if not ledger.spend(cost):
                return False
        for effect in evolution.effects:
            if not piece.apply_effect(effect):
                self._log.debug("Effect %s on %s had no effect", effect, evolution_id)
        piece.record_investment(cost)
        self._acquired[evolution_id] = piece_type
        if created:
            self._store(piece)
        self._log.info("Acquired %s for %s at cost %s", evolution_id, piece_type.name, cost)
        self._track_combination()
        return True

    def invest_time(self, piece_type: PieceType, milliseconds: float) -> bool:
        try:
            piece = self._live_piece(PieceType.coerce(piece_type))
        except ValueError:
            return False
        if piece is None:
            return False
        piece.add_time_investment(milliseconds)
        return True

    # ------------------------------------------------------------------
    # Costs
    # ------------------------------------------------------------------
    def can_afford_evolution(
        self,
        evolution: Evolution,
        resources: Optional[Mapping[str, float]] = None,
    ) -> bool:
        """Structural validity check, plus a snapshot comparison when ``resources`` is given."""

        if not isinstance(evolution.piece_type, PieceType):
            return False
        if not isinstance(evolution.tier, int) or evolution.tier < 1:
            return False
        if not isinstance(evolution.cost, Mapping):
            return False
        for kind, amount in evolution.cost.items():
            if kind not in RESOURCE_KINDS:
                return False
            if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount < 0:
                return False
        if evolution.id not in self._trees[evolution.piece_type]:
            return False
        if resources is None:
            return True
        piece = self._live_piece(evolution.piece_type)
        level = piece.evolution_level if piece else 1
        cost = self.cost_calculator.calculate_scaled_cost(evolution, level)
        return all(resources.get(kind, 0) >= amount for kind, amount in cost.items())

    def quote_evolution(self, evolution: Evolution) -> ResourceCost:
        piece = self._live_piece(evolution.piece_type)
        level = piece.evolution_level if piece else 1
        return self.cost_calculator.calculate_scaled_cost(evolution, level)

    # ------------------------------------------------------------------
    # Combinations
    # ------------------------------------------------------------------
    def calculate_evolution_combinations(self) -> int:
        """Size of the reachable evolution state space as an exact integer."""

        total = 1
        for tree in self._trees.values():
            piece_combinations = 1
            for count in tree.branching_by_tier().values():
                piece_combinations *= count * LEVELS_PER_EVOLUTION
            if piece_combinations == 1:
                piece_combinations = LEVELS_PER_EVOLUTION ** FALLBACK_ATTRIBUTE_AXES
            total *= piece_combinations
        return total * SYNERGY_MULTIPLIER

    def _ordered_pieces(self) -> List[PieceEvolution]:
        return [
            self._evolutions[self._by_piece[piece_type]]
            for piece_type in PIECE_ORDER
            if piece_type in self._by_piece
        ]

    def _global_hash(self, pieces: Iterable[PieceEvolution]) -> str:
        digest = hashlib.sha1()
        for piece in pieces:
            digest.update(
                f"{piece.piece_type.value}:{piece.id}:{piece.evolution_level}:"
                f"{piece.generate_hash()};".encode("utf-8")
            )
        return digest.hexdigest()

    def _track_combination(self) -> None:
        pieces = self._ordered_pieces()
        combination_hash = self._global_hash(pieces)
        if combination_hash in self._combination_hashes:
            return
        synergies = active_synergies(pieces)
        base_power = sum(piece.calculate_power_score() for piece in pieces)
        record = CombinationRecord(
            id=combination_hash[:16],
            combination_hash=combination_hash,
            piece_evolution_ids=tuple(piece.id for piece in pieces),
            total_power=base_power * synergy_power_multiplier(synergies),
            discovered_at=now_ms(),
            piece_types=tuple(piece.piece_type for piece in pieces),
            synergy_ids=tuple(bonus.id for bonus in synergies),
        )
        self._combinations.append(record)
        self._combination_hashes.add(combination_hash)
        self._combination_count += 1
        self._combo_log.debug(
            "Discovered combination %s (power %.1f, total %d)",
            record.id,
            record.total_power,
            self._combination_count,
        )

    def calculate_synergy_bonuses(self) -> List[SynergyBonus]:
        return active_synergies(self._ordered_pieces())

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    def get_evolution_tree(self, piece_type: PieceType) -> List[EvolutionNode]:
        try:
            tree = self.tree(piece_type)
        except ValueError:
            return []
        return tree.build_nodes(self.is_evolution_unlocked, self._acquired.__contains__)

    def get_all_evolutions(self) -> List[PieceEvolution]:
        return [piece.copy() for piece in self._evolutions.values()]

    def get_evolutions_by_piece_type(self, piece_type: PieceType) -> List[PieceEvolution]:
        try:
            piece_type = PieceType.coerce(piece_type)
        except ValueError:
            return []
        return [piece.copy() for piece in self._evolutions.values() if piece.piece_type == piece_type]

    def get_piece_evolution(self, evolution_id: str) -> Optional[PieceEvolution]:
        piece = self._evolutions.get(evolution_id)
        return piece.copy() if piece else None

    def get_discovered_combinations(self) -> List[CombinationRecord]:
        return list(self._combinations)

    def get_combination_count(self) -> int:
        return self._combination_count

    def get_unlocked_evolutions(self) -> Tuple[str, ...]:
        return tuple(self._acquired)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def serialize_evolutions(self) -> EvolutionSaveData:
        save = EvolutionSaveData(
            version=SAVE_VERSION,
            evolutions=[piece.as_dict() for piece in self._evolutions.values()],
            combinations=[encode_combination(record) for record in self._combinations],
            unlocked_nodes=list(self._acquired),
            synergy_bonuses=[bonus.as_dict() for bonus in self.calculate_synergy_bonuses()],
            total_combinations=str(self._combination_count),
            timestamp=now_ms(),
        )
        save.checksum = compute_checksum(save)
        self._save_log.debug(
            "Serialized %d evolutions and %d combinations",
            len(save.evolutions),
            len(save.combinations),
        )
        return save

    def deserialize_evolutions(self, save_data: SaveInput, strict: bool = False) -> LoadReport:
        """Replace the current state with ``save_data``; all or nothing."""

        try:
            save = coerce_save_data(save_data)
        except SaveDataError as exc:
            self._save_log.warning("Rejected save payload: %s", exc)
            return LoadReport(applied=False, checksum_valid=False, error=str(exc))

        checksum_valid = verify_checksum(save) or (is_empty(save) and not save.checksum)
        if not checksum_valid:
            self._save_log.warning("Checksum mismatch on save version %r", save.version)
            if strict:
                return LoadReport(
                    applied=False,
                    checksum_valid=False,
                    version=save.version,
                    error="checksum mismatch",
                )
        if save.version and save.version != SAVE_VERSION:
            self._save_log.info("Loading save version %s as best effort", save.version)

        try:
            pieces = decode_evolutions(save.evolutions)
            records = [decode_combination(entry) for entry in save.combinations]
            total = decode_total(save.total_combinations)
        except SaveDataError as exc:
            self._save_log.warning("Rejected save payload: %s", exc)
            return LoadReport(
                applied=False,
                checksum_valid=checksum_valid,
                version=save.version,
                error=str(exc),
            )

        evolutions: Dict[str, PieceEvolution] = {}
        by_piece: Dict[PieceType, str] = {}
        for piece in pieces:
            current = evolutions.get(by_piece.get(piece.piece_type, ""))
            if current is not None:
                if current.evolution_level >= piece.evolution_level:
                    continue
                del evolutions[current.id]
            evolutions[piece.id] = piece
            by_piece[piece.piece_type] = piece.id

        combinations: List[CombinationRecord] = []
        hashes: Set[str] = set()
        for record in records:
            if record.combination_hash in hashes:
                continue
            hashes.add(record.combination_hash)
            combinations.append(record)

        acquired: Dict[str, PieceType] = {}
        for evolution_id in save.unlocked_nodes:
            evolution = self.find_evolution(evolution_id)
            if evolution is None:
                self._save_log.debug("Dropping unknown evolution id %s", evolution_id)
                continue
            acquired[evolution_id] = evolution.piece_type

        self._evolutions = evolutions
        self._by_piece = by_piece
        self._combinations = combinations
        self._combination_hashes = hashes
        self._combination_count = total
        self._acquired = acquired
        self._save_log.info(
            "Loaded %d evolutions, %d combinations (total %d)",
            len(evolutions),
            len(combinations),
            total,
        )
        return LoadReport(
            applied=True,
            checksum_valid=checksum_valid,
            version=save.version,
            evolutions_loaded=len(evolutions),
            combinations_loaded=len(combinations),
        )


__all__ = [
    "EvolutionSystem",
    "FALLBACK_ATTRIBUTE_AXES",
    "LEVELS_PER_EVOLUTION",
    "ResourceLedger",
]
