"""
models.py — Python dataclasses and enums for the focus garden application.

Plants, sessions and seeds are frozen dataclasses: the engines never mutate
them in place, they return new values built with dataclasses.replace().
All timestamps are integer milliseconds since the Unix epoch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class MutationId(str, Enum):
    """The five permanent cosmetic mutations, in canonical draw order."""
    VARIEGATED = 'variegated'
    TINT_SHIFT = 'tint_shift'
    LEAF_SHAPE = 'leaf_shape'
    DWARF = 'dwarf'
    GROWTH_FORM = 'growth_form'


ALL_MUTATION_IDS: Tuple[MutationId, ...] = tuple(MutationId)


class DiseaseType(str, Enum):
    ROOT_ROT = 'root_rot'
    PEST = 'pest'
    FUNGUS = 'fungus'
    NUTRIENT_DEF = 'nutrient_def'


class SessionMinutes(int, Enum):
    TEN = 10
    TWENTY_FIVE = 25
    FORTY_FIVE = 45
    SIXTY = 60


ALL_SESSION_MINUTES: Tuple[SessionMinutes, ...] = tuple(SessionMinutes)


class SessionStatus(str, Enum):
    IDLE = 'idle'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    INTERRUPTED = 'interrupted'


class Condition(str, Enum):
    """Plant condition classification, listed in priority order."""
    DEAD = 'dead'
    DISEASED = 'diseased'
    CRITICAL = 'critical'
    THIRSTY = 'thirsty'
    MALNOURISHED = 'malnourished'
    WEAK = 'weak'
    OK = 'ok'
    HEALTHY = 'healthy'


class Rarity(str, Enum):
    COMMON = 'common'
    RARE = 'rare'
    EPIC = 'epic'


@dataclass(frozen=True)
class CareState:
    """Care substate given to a freshly planted seed."""
    water_level: float = 70.0
    nutrition_level: float = 70.0
    health: float = 100.0
    disease_type: Optional[DiseaseType] = None
    last_watered_at: Optional[int] = None
    last_fertilized_at: Optional[int] = None
    last_care_check_at: int = 0
    is_dead: bool = False


@dataclass(frozen=True)
class Plant:
    """A growing plant occupying one slot."""
    id: str = ""
    species_id: str = ""
    slot_index: int = 0
    nickname: Optional[str] = None
    growth_points: int = 0
    mutations: Tuple[MutationId, ...] = ()
    planted_at: int = 0
    updated_at: int = 0
    # Care substate
    water_level: float = 70.0
    nutrition_level: float = 70.0
    health: float = 100.0
    disease_type: Optional[DiseaseType] = None
    last_watered_at: Optional[int] = None
    last_fertilized_at: Optional[int] = None
    last_care_check_at: int = 0
    is_dead: bool = False

    def has_mutation(self, mutation: MutationId) -> bool:
        return mutation in self.mutations


@dataclass(frozen=True)
class FocusSession:
    """A timed focus session covering every growing plant."""
    id: str = ""
    minutes: SessionMinutes = SessionMinutes.TWENTY_FIVE
    status: SessionStatus = SessionStatus.IDLE
    started_at: Optional[int] = None
    ended_at: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def has_ended(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.INTERRUPTED)


@dataclass(frozen=True)
class PlantSessionResult:
    """Outcome of a finished session for a single plant."""
    plant_id: str
    earned_gp: int = 0
    new_mutation: Optional[MutationId] = None


@dataclass(frozen=True)
class SessionSummary:
    """Aggregate outcome shown on the results screen."""
    completed_successfully: bool
    elapsed_minutes: float
    plant_results: Tuple[PlantSessionResult, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Seed:
    """An unplanted species token obtained from the gacha."""
    id: str = ""
    species_id: str = ""
    obtained_at: int = 0


@dataclass(frozen=True)
class PlantSpecies:
    """Static catalog entry."""
    id: str
    name: str
    rarity: Rarity
    category: str
    description: str = ""
    growth_rate_multiplier: float = 1.0
